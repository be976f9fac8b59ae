from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from inbox_actions.config.settings import load_settings
from inbox_actions.models import EmailGroup
from inbox_actions.pipeline.analysis import AnalysisService, OpenAIResponder

router = APIRouter()


class AnalyzeRequest(BaseModel):
    emailGroup: Optional[Dict[str, Any]] = None


def get_analysis_service() -> AnalysisService:
    return AnalysisService(OpenAIResponder(model=load_settings().openai_model))


@router.post("/analyze")
async def analyze_group(
    req: AnalyzeRequest,
    service: AnalysisService = Depends(get_analysis_service),
) -> dict:
    if not req.emailGroup:
        raise HTTPException(status_code=400, detail="Email group is required")

    analysis = await service.analyze(EmailGroup.from_dict(req.emailGroup))
    return analysis.to_dict()
