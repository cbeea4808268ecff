"""Core round rules (state model, FSM, reducer, alerts).

Kept free of FastAPI/Redis/httpx concerns so the host, the apply engine and tests all
drive the same pure transition function.
"""
