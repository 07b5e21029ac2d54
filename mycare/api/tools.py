# mycare/api/tools.py
from __future__ import annotations

import logging
from typing import List, Union

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from mycare.services import ToolRecordService
from .schemas import ToolCreate, ToolRecord

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tools")

_service = ToolRecordService()


def get_tool_service() -> ToolRecordService:
    return _service


def _server_error() -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal Server Error"},
    )


@router.post("", response_model=ToolRecord, status_code=status.HTTP_201_CREATED)
def create_tool(
    payload: ToolCreate,
    service: ToolRecordService = Depends(get_tool_service),
) -> Union[ToolRecord, JSONResponse]:
    """
    Store one answered question. No authentication at this layer.
    """
    logger.info("Received tool record for question %s", payload.question_id)
    try:
        record = service.create(**payload.model_dump())
    except SQLAlchemyError:
        logger.exception("Error creating tool record")
        return _server_error()
    return ToolRecord.model_validate(record)


@router.get("", response_model=List[ToolRecord])
def list_tools(
    service: ToolRecordService = Depends(get_tool_service),
) -> Union[List[ToolRecord], JSONResponse]:
    try:
        records = service.list()
    except SQLAlchemyError:
        logger.exception("Error fetching tool records")
        return _server_error()
    return [ToolRecord.model_validate(r) for r in records]
