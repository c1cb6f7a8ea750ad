from fastapi import APIRouter, Request

router = APIRouter()


@router.get("/api/health")
async def health_check(request: Request):
    """
    Health check endpoint.

    Reports which mail providers are usable without exposing any credential.
    """
    pipeline = request.app.state.pipeline
    return {
        "status": "ok",
        "providers": [
            {"name": provider.name, "configured": provider.configured}
            for provider in pipeline.providers
        ],
        "recaptcha": pipeline.verifier is not None,
    }
