"""
Todo 接口：增删改查，全部要求登录，且只作用于当前用户自己的 Todo

id 格式非法与记录不存在一样返回 404（空响应体）。
"""

import structlog
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse, Response

from todo_api.api.deps import get_todo_store
from todo_api.errors import NotFound, StoreError, ValidationError
from todo_api.observability.metrics import TODO_OPS_TOTAL
from todo_api.security.auth import AuthContext, get_current_user
from todo_api.todo.schemas import TodoCreate, TodoEnvelope, TodoList, TodoOut, TodoPatch
from todo_api.todo.store import TodoStore

router = APIRouter(prefix="/todos", tags=["待办"])
log = structlog.get_logger()


def _failure(op: str, e: Exception) -> Response:
    """把 Store 层异常映射为 HTTP 响应"""
    if isinstance(e, NotFound):
        TODO_OPS_TOTAL.labels(op=op, outcome="not_found").inc()
        return Response(status_code=404)
    if isinstance(e, ValidationError):
        TODO_OPS_TOTAL.labels(op=op, outcome="invalid").inc()
        log.warning("Todo 参数校验失败", op=op, errors=e.errors)
        return JSONResponse(status_code=400, content={"errors": e.errors})
    TODO_OPS_TOTAL.labels(op=op, outcome="error").inc()
    cause = getattr(e, "cause", None) or e
    log.error("Todo 操作失败", op=op, error=str(cause), exc_info=cause)
    return Response(status_code=400)


@router.post("", response_model=TodoOut)
async def create_todo(
    body: TodoCreate,
    auth: AuthContext = Depends(get_current_user),
    todos: TodoStore = Depends(get_todo_store),
):
    try:
        todo = await todos.create(auth.user.id, body.text, body.completed)
    except (ValidationError, StoreError) as e:
        return _failure("create", e)
    TODO_OPS_TOTAL.labels(op="create", outcome="success").inc()
    return TodoOut.model_validate(todo)


@router.get("", response_model=TodoList)
async def list_todos(
    auth: AuthContext = Depends(get_current_user),
    todos: TodoStore = Depends(get_todo_store),
):
    try:
        items = await todos.list_by_owner(auth.user.id)
    except StoreError as e:
        return _failure("list", e)
    TODO_OPS_TOTAL.labels(op="list", outcome="success").inc()
    return TodoList(todos=[TodoOut.model_validate(t) for t in items])


@router.get("/{todo_id}", response_model=TodoEnvelope)
async def get_todo(
    todo_id: str,
    auth: AuthContext = Depends(get_current_user),
    todos: TodoStore = Depends(get_todo_store),
):
    try:
        todo = await todos.find_one(auth.user.id, todo_id)
    except (NotFound, StoreError) as e:
        return _failure("get", e)
    TODO_OPS_TOTAL.labels(op="get", outcome="success").inc()
    return TodoEnvelope(todo=TodoOut.model_validate(todo))


@router.delete("/{todo_id}", response_model=TodoEnvelope)
async def delete_todo(
    todo_id: str,
    auth: AuthContext = Depends(get_current_user),
    todos: TodoStore = Depends(get_todo_store),
):
    try:
        todo = await todos.delete(auth.user.id, todo_id)
    except (NotFound, StoreError) as e:
        return _failure("delete", e)
    TODO_OPS_TOTAL.labels(op="delete", outcome="success").inc()
    return TodoEnvelope(todo=TodoOut.model_validate(todo))


@router.patch("/{todo_id}", response_model=TodoEnvelope)
async def update_todo(
    todo_id: str,
    body: TodoPatch,
    auth: AuthContext = Depends(get_current_user),
    todos: TodoStore = Depends(get_todo_store),
):
    """只接受 text / completed；completed 不为 true 时一律重置为未完成"""
    try:
        todo = await todos.update(
            auth.user.id, todo_id, text=body.text, completed=body.completed
        )
    except (NotFound, ValidationError, StoreError) as e:
        return _failure("update", e)
    TODO_OPS_TOTAL.labels(op="update", outcome="success").inc()
    return TodoEnvelope(todo=TodoOut.model_validate(todo))
