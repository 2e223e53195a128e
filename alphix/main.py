from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from alphix.api.routers.fee import router as fee_router
from alphix.api.routers.pool import router as pool_router
from alphix.api.routers.rehypothecation import router as rehypothecation_router


app = FastAPI(title="Alphix API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(pool_router)
app.include_router(fee_router)
app.include_router(rehypothecation_router)
