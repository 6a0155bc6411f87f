"""
种子数据脚本：初始化两个本地开发用账号及各自的 Todo

运行方式：
    poetry run python scripts/seed_data.py

幂等设计：按 email 判断账号是否已存在，已存在则跳过该账号及其 Todo。
第一个账号会额外签发一个会话 Token 并打印，方便直接用 curl 调试。
"""

import asyncio
import sys
from pathlib import Path

# 确保项目根目录在 sys.path 中
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from todo_api.config import get_settings
from todo_api.db.engine import Database
from todo_api.db.models import User
from todo_api.todo.store import TodoStore
from todo_api.users.store import UserStore

settings = get_settings()

SEED_USERS = [
    {
        "email": "someone@example.com",
        "password": "$peci4lPASS#all",
        "issue_token": True,
        "todos": [
            {"text": "First test todo."},
        ],
    },
    {
        "email": "someoneelse@example.com",
        "password": "$peci4lPASS#all",
        "issue_token": False,
        "todos": [
            {"text": "Second test todo.", "completed": True},
        ],
    },
]


async def seed():
    """插入种子账号和 Todo"""
    database = Database(settings)
    await database.connect()
    try:
        async with database.session() as session:
            users = UserStore(session, settings)
            todos = TodoStore(session)

            for data in SEED_USERS:
                existing = await session.scalar(select(User).where(User.email == data["email"]))
                if existing:
                    print(f"  [跳过] {data['email']} 已存在")
                    continue

                user = await users.create(data["email"], data["password"])
                for item in data["todos"]:
                    await todos.create(user.id, item["text"], item.get("completed", False))
                print(f"  [新增] {data['email']}（{len(data['todos'])} 条 Todo）")

                if data["issue_token"]:
                    token = await users.generate_auth_token(user)
                    print(f"         {settings.AUTH_HEADER}: {token}")
    finally:
        await database.close()

    print(f"\n种子数据写入完成，共 {len(SEED_USERS)} 个账号")


if __name__ == "__main__":
    asyncio.run(seed())
