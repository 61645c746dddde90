from fastapi import APIRouter, Depends, File, UploadFile
from starlette.concurrency import run_in_threadpool

from foodshare.ai import GeminiClient, analyze_image, generate_recipe, get_ai_client, parse_recipe
from foodshare.ai.schemas import AIAnalysisResult, RecipeRequest, RecipeResponse
from foodshare.core.config import get_settings

router = APIRouter(prefix="/ai", tags=["ai"])


@router.post("/analyze", response_model=AIAnalysisResult)
async def analyze(
    file: UploadFile = File(...),
    client: GeminiClient = Depends(get_ai_client),
):
    """Ingredients and dish ideas from a food photo (image/*, at most 5 MB)."""
    settings = get_settings()
    # Read one byte past the limit so oversized uploads fail without buffering them whole.
    data = await file.read(settings.max_image_bytes + 1)
    return await run_in_threadpool(analyze_image, client, data, file.content_type, settings)


@router.post("/recipe", response_model=RecipeResponse)
def recipe(payload: RecipeRequest, client: GeminiClient = Depends(get_ai_client)):
    raw = generate_recipe(client, payload.ingredients)
    return RecipeResponse(raw=raw, recipe=parse_recipe(raw))
