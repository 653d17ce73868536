"""REST API routes for task parsing."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query
from pydantic import BaseModel

from tools.task_tools import (
    handle_code_regex,
    handle_keywords_validate,
    handle_parse_line,
    handle_parse_text,
    handle_parser_status,
)


class ParseBody(BaseModel):
    text: str
    path: str = ""


class ParseLineBody(BaseModel):
    line: str
    line_number: int = 0
    path: str = ""


class KeywordsBody(BaseModel):
    keywords: List[str]


def register_task_routes(app_router: APIRouter, parser) -> None:
    """Attach task-parsing REST routes that use the shared parser."""

    @app_router.post("/parse")
    def parse_text(
        body: ParseBody,
        state: Optional[str] = Query(None),
        completed: Optional[bool] = Query(None),
    ):
        try:
            return handle_parse_text(
                parser, text=body.text, path=body.path, state=state, completed=completed
            )
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app_router.post("/parse-line")
    def parse_line(body: ParseLineBody):
        result = handle_parse_line(parser, **body.model_dump())
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.post("/keywords/validate")
    def validate(body: KeywordsBody):
        result = handle_keywords_validate(keywords=body.keywords)
        if not result["valid"]:
            raise HTTPException(status_code=422, detail=result)
        return result

    @app_router.get("/code-regex/{language}")
    def get_code_regex(language: str):
        result = handle_code_regex(parser, language=language)
        if "error" in result:
            raise HTTPException(status_code=404, detail=result["error"])
        return result

    @app_router.get("/status")
    def get_status():
        return handle_parser_status(parser)
