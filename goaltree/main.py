# goaltree/main.py
import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from goaltree.config import settings
from goaltree.core.exceptions import GoalTreeError
from goaltree.database import engine, create_tables, AsyncSessionLocal
from goaltree.repositories.goal_repository import GoalRepository
from goaltree.routers import goal, task, tree, suggestions
from goaltree.services.seed import seed_demo_tree

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


app = FastAPI(title="GoalTree - Hierarchical Goal Planner", version="1.0")

# Include Routers
app.include_router(goal.router)
app.include_router(task.router)
app.include_router(tree.router)
app.include_router(suggestions.router)


@app.exception_handler(GoalTreeError)
async def goal_tree_error_handler(request: Request, exc: GoalTreeError):
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.on_event("startup")
async def startup_event():
    await create_tables(engine)
    if settings.SEED_DEMO_DATA:
        async with AsyncSessionLocal() as session:
            result = await seed_demo_tree(GoalRepository(session))
            if result.goals_created:
                logger.info("Seeded demo data on startup")


@app.get("/")
def read_root():
    return {"message": "Welcome to GoalTree"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("goaltree.main:app", host="0.0.0.0", port=8000, reload=True)
