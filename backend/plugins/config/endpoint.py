from typing import Annotated

from fastapi import APIRouter, Depends, Request, Response

from backend.utils.dependencies import require_api_token

from .models import ConfigMetaResponse, ResetConfigResponse, SaveConfigResponse
from .service import ConfigService, get_config_service

router = APIRouter()

YAML_MEDIA_TYPE = "application/x-yaml"


@router.get(
    "",
    response_class=Response,
    summary="Get the stored configuration",
    description="Returns the raw YAML document exactly as it was saved.",
    responses={
        200: {"content": {YAML_MEDIA_TYPE: {}}},
        404: {"description": "No configuration has been saved"},
    },
)
async def get_config(
    service: Annotated[ConfigService, Depends(get_config_service)],
):
    content = await service.get_config()
    return Response(
        content=content,
        media_type=YAML_MEDIA_TYPE,
        headers={"Content-Disposition": 'inline; filename="conf.yml"'},
    )


@router.post(
    "",
    response_model=SaveConfigResponse,
    dependencies=[Depends(require_api_token)],
    summary="Save the configuration",
    description=(
        "Replaces the stored document. The body is raw YAML, or JSON carrying it "
        "in a `config` or `data` field."
    ),
)
async def save_config(
    request: Request,
    service: Annotated[ConfigService, Depends(get_config_service)],
):
    body = await request.body()
    text = service.extract_config_text(body, request.headers.get("content-type", ""))
    return await service.save_config(text)


@router.post(
    "/reset",
    response_model=ResetConfigResponse,
    dependencies=[Depends(require_api_token)],
    summary="Reset the configuration",
    description="Deletes the stored document so clients fall back to their default file.",
)
async def reset_config(
    service: Annotated[ConfigService, Depends(get_config_service)],
):
    return await service.reset_config()


@router.get(
    "/meta",
    response_model=ConfigMetaResponse,
    response_model_exclude_none=True,
    summary="Get configuration metadata",
)
async def get_config_meta(
    service: Annotated[ConfigService, Depends(get_config_service)],
):
    return await service.get_meta()
