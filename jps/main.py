# jps/main.py
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from sqlalchemy import exc as sa_exc
from jps.database import engine, Base
from jps.routers import performance

# Register every table on Base.metadata
from jps.models import member, activity, task, points, complaint, snapshot  # noqa: F401


@asynccontextmanager
async def lifespan(app: FastAPI):
    # create tables (async). ignore duplicate-object errors from previous partial runs.
    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except sa_exc.IntegrityError as e:
            msg = str(getattr(e, "orig", e))
            if "duplicate key value violates unique constraint" in msg or "already exists" in msg:
                logging.warning("Ignored duplicate DDL error during create_all: %s", msg)
            else:
                raise
    yield


app = FastAPI(title="JPS - Member Performance Score Engine", version="1.0", lifespan=lifespan)

app.include_router(performance.router)

@app.get("/")
def read_root():
    return {"message": "Welcome to the JPS engine"}

if __name__ == "__main__":
    import uvicorn
    uvicorn.run("jps.main:app", host="0.0.0.0", port=8000, reload=True)
