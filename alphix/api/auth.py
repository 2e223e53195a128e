from __future__ import annotations

from fastapi import Header, HTTPException


def get_caller(x_caller_address: str = Header(...)) -> str:
    caller = x_caller_address.strip()
    if not caller:
        raise HTTPException(status_code=401, detail="Missing caller address.")
    return caller
