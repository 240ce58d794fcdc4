"""Analysis steps: evidence coverage, assumptions, decision levers."""
