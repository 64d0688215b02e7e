"""Demo backend for scaling verification.

Every replica answers GET /scaling with its own hostname, which is the
identity token the verifier counts. Deploy it behind a Service or Route and
point SCALING_BASE_URL at it.

Run locally with: python demo_app.py
Then probe with: curl http://localhost:8080/scaling
"""

import os
import socket

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

app = FastAPI(
    title="Scaling Demo Backend",
    description="Echoes the replica hostname so a load balancer's backends can be told apart",
    version="0.1.0",
)

# Pods get their name as hostname; HOSTNAME allows overriding it locally.
INSTANCE_ID = os.environ.get("HOSTNAME") or socket.gethostname()


@app.get("/")
async def root():
    """Root endpoint - returns API info."""
    return {
        "name": "Scaling Demo Backend",
        "version": "0.1.0",
        "endpoints": {
            "GET /scaling": "Hostname of the replica serving the request",
            "GET /health": "Liveness and readiness",
        },
    }


@app.get("/scaling", response_class=PlainTextResponse)
async def scaling() -> str:
    """Return the identity of the replica serving the request."""
    return INSTANCE_ID


@app.get("/health")
async def health():
    return {"status": "ok", "instance": INSTANCE_ID}


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=int(os.environ.get("PORT", "8080")))
