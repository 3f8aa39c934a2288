from contextlib import asynccontextmanager
from datetime import datetime
from typing import Literal, Optional
import logging
import uuid

from fastapi import Depends, FastAPI, Header, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

import sanitizer
from config import get_settings
from database import (
    init_db,
    get_todos,
    create_todo_db,
    update_todo_db,
    delete_todo_db,
)
from filtering import filter_todos, sort_todos
from gateway import GatewayError, ModelError, ModelGateway, close_clients
from models import (
    AnalysisTodo,
    AnalyzeTodosRequest,
    GenerateTodoRequest,
    Priority,
    Todo,
    TodoAnalysis,
    TodoCreate,
    TodoUpdate,
)
from prompts import build_analysis_prompt, build_todo_prompt, empty_analysis
from repair import repair_generated_todo
from temporal import now_kst, resolve_references, to_kst
from todo_stats import PERIODS, aggregate

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
logger = logging.getLogger(__name__)

CONFIG_ERROR = "AI 서비스 설정이 완료되지 않았습니다."
MALFORMED_BODY_ERROR = "요청 데이터 형식이 올바르지 않습니다."
UNEXPECTED_ERROR = "요청 처리 중 오류가 발생했습니다. 잠시 후 다시 시도해주세요."


@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Startup
    init_db()
    yield
    # Shutdown
    await close_clients()

app = FastAPI(title="AI Todo", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """AI endpoints answer malformed bodies with their own 400 shape; the rest keep 422."""
    if request.url.path.startswith("/api/ai/"):
        return _error(400, MALFORMED_BODY_ERROR)
    return JSONResponse(
        status_code=422,
        content={
            "error": "ValidationError",
            "message": "Request validation failed",
            "detail": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return _error(500, UNEXPECTED_ERROR)


def get_gateway() -> ModelGateway:
    # Settings (and so the API key) are read once per request
    return ModelGateway(get_settings())


def get_now() -> datetime:
    return now_kst()


def get_current_user(x_user_id: Optional[str] = Header(default=None)) -> str:
    """Owner reference issued by the auth backend, passed in the X-User-Id header."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Not authenticated")
    return x_user_id.strip()


@app.get("/")
def health_check() -> dict:
    return {"message": "Healthy"}


@app.post("/api/ai/generate-todo")
async def generate_todo(
    request: GenerateTodoRequest,
    gateway: ModelGateway = Depends(get_gateway),
    now: datetime = Depends(get_now),
):
    """Convert a free-text sentence into a structured todo."""
    validation = sanitizer.validate(request.prompt)
    if not validation.valid:
        return _error(400, validation.error)

    text = sanitizer.normalize(request.prompt)
    logger.info(
        "Generate todo input: raw=%r processed=%r (%d -> %d chars)",
        request.prompt[:50], text[:50], len(request.prompt), len(text),
    )

    if not gateway.is_configured:
        logger.error("ANTHROPIC_API_KEY is not configured")
        return _error(500, CONFIG_ERROR)

    refs = resolve_references(now)
    spec = build_todo_prompt(text, refs)

    try:
        raw = await gateway.generate(spec.instruction, spec.schema, spec.name)
    except GatewayError as e:
        logger.error("Todo generation failed (%s) for input %r: %s", type(e).__name__, text[:50], e)
        return _error(e.status_code, e.user_message)

    todo = repair_generated_todo(raw, refs.today)
    logger.info(
        "Generated todo: title=%r priority=%s category=%s due_date=%s",
        todo.title, todo.priority, todo.category, todo.due_date,
    )
    return {"success": True, "data": todo.model_dump(exclude_none=True)}


def _parse_analysis(raw: dict) -> TodoAnalysis:
    if isinstance(raw.get("urgentTasks"), list):
        raw = {**raw, "urgentTasks": raw["urgentTasks"][:5]}
    try:
        return TodoAnalysis.model_validate(raw)
    except ValidationError as e:
        raise ModelError(f"analysis reply does not match schema: {e.error_count()} errors") from e


@app.post("/api/ai/analyze-todos")
async def analyze_todos(
    request: AnalyzeTodosRequest,
    gateway: ModelGateway = Depends(get_gateway),
    now: datetime = Depends(get_now),
):
    """Summarize today's or this week's todos into insights and recommendations."""
    if not isinstance(request.todos, list):
        return _error(400, "유효한 할 일 목록이 필요합니다.")

    if request.period not in PERIODS:
        return _error(400, "분석 기간은 'today' 또는 'week'이어야 합니다.")

    try:
        todos = [AnalysisTodo.model_validate(item) for item in request.todos]
    except ValidationError as e:
        logger.warning("Rejected analysis payload: %d invalid fields", e.error_count())
        return _error(400, "할 일 목록의 형식이 올바르지 않습니다.")

    period = request.period
    now = to_kst(now)
    statistics = aggregate(todos, period, now)

    # Nothing in the window: fixed answer, no model call
    if not statistics.todos:
        return {"success": True, "data": empty_analysis(period).model_dump()}

    if not gateway.is_configured:
        logger.error("ANTHROPIC_API_KEY is not configured")
        return _error(500, CONFIG_ERROR)

    refs = resolve_references(now)
    spec = build_analysis_prompt(statistics, statistics.todos, period, refs)

    try:
        raw = await gateway.generate(
            spec.instruction, spec.schema, spec.name,
            max_tokens=gateway.settings.analysis_max_tokens,
        )
        analysis = _parse_analysis(raw)
    except GatewayError as e:
        logger.error(
            "Todo analysis failed (%s) for period=%s total=%d: %s",
            type(e).__name__, period, statistics.total, e,
        )
        return _error(e.status_code, e.user_message)

    logger.info(
        "Analysis done: period=%s total=%d completed=%d rate=%s%%",
        period, statistics.total, statistics.completed, statistics.completion_rate_detail,
    )
    return {"success": True, "data": analysis.model_dump()}


@app.get("/todos")
def list_todos(
    search: Optional[str] = None,
    status: Literal["all", "active", "completed"] = "all",
    priority: list[Priority] = Query(default=[]),
    sort_by: Literal["created_date", "priority", "due_date"] = "created_date",
    direction: Optional[Literal["asc", "desc"]] = None,
    user_id: str = Depends(get_current_user),
) -> list[Todo]:
    todos = filter_todos(get_todos(user_id), search=search, status=status, priorities=priority)
    return sort_todos(todos, sort_by=sort_by, direction=direction)


@app.post("/todos", status_code=201)
def create_todo(todo_data: TodoCreate, user_id: str = Depends(get_current_user)) -> Todo:
    return create_todo_db(
        str(uuid.uuid4()),
        user_id,
        todo_data.title,
        description=todo_data.description,
        due_date=todo_data.due_date,
        priority=todo_data.priority,
        category=todo_data.category,
    )


@app.patch("/todos/{todo_id}")
def update_todo(todo_id: str, todo_data: TodoUpdate, user_id: str = Depends(get_current_user)) -> Todo:
    # Only description and due_date may be cleared with an explicit null
    updates = {
        field: value for field, value in todo_data.model_dump(exclude_unset=True).items()
        if value is not None or field in ("description", "due_date")
    }
    result = update_todo_db(user_id, todo_id, **updates)
    if not result:
        raise HTTPException(status_code=404, detail="Todo not found")
    return result


@app.delete("/todos/{todo_id}")
def delete_todo(todo_id: str, user_id: str = Depends(get_current_user)) -> dict:
    if not delete_todo_db(user_id, todo_id):
        raise HTTPException(status_code=404, detail="Todo not found")
    return {"status": "deleted"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
