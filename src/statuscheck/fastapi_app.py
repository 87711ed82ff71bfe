# fastapi_app.py
from __future__ import annotations

import io
import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from statuscheck.config import settings
from statuscheck.errors import DeploymentsNotStableError, DiscoveryError
from statuscheck.kube_client import KubeClient
from statuscheck.labeller import Labeller
from statuscheck.status_check import status_check

# Configure logging
logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))
logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FastAPI app + CORS
# -----------------------------------------------------------------------------
app = FastAPI(title="Kube Status Check", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Models
# -----------------------------------------------------------------------------
class StatusCheckRequest(BaseModel):
    namespace: str = Field(default=settings.K8S_NAMESPACE, description="Namespace to check")
    run_id: str = Field(..., min_length=1, description="Run identifier the deployments are labelled with")
    deadline_secs: Optional[float] = Field(default=None, gt=0, description="Global rollout deadline")


class StatusCheckResponse(BaseModel):
    success: bool
    namespace: str
    run_id: str
    output: List[str] = Field(default_factory=list)
    error: Optional[str] = None

# -----------------------------------------------------------------------------
# Dependencies
# -----------------------------------------------------------------------------
@lru_cache(maxsize=1)
def get_kube_client() -> KubeClient:
    """Cluster client shared by all requests."""
    return KubeClient(
        namespace=settings.K8S_NAMESPACE,
        in_cluster=settings.K8S_IN_CLUSTER,
        context=settings.K8S_CONTEXT,
    )

# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
@app.get("/health")
async def health():
    return {"status": "healthy"}


@app.post("/api/status-check", response_model=StatusCheckResponse)
async def api_status_check(body: StatusCheckRequest, client: KubeClient = Depends(get_kube_client)):
    """Wait for the deployments of a run to roll out and report the outcome."""
    out = io.StringIO()
    labeller = Labeller(body.run_id, managed_by=settings.APP_NAME)
    logger.info(f"🚀 Starting status check: namespace={body.namespace}, run_id={body.run_id}")

    error = None
    try:
        await status_check(client, body.namespace, labeller, out, deadline_s=body.deadline_secs)
    except DiscoveryError as e:
        logger.error(f"❌ Status check failed for {body.namespace}: {e}")
        raise HTTPException(500, f"Status check failed: {e}")
    except DeploymentsNotStableError as e:
        error = str(e)

    return StatusCheckResponse(
        success=error is None,
        namespace=body.namespace,
        run_id=labeller.run_id,
        output=out.getvalue().splitlines(),
        error=error,
    )

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.HTTP_PORT)
