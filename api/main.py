from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from compliance.config import configure_logging
from compliance.orchestrator import get_default_food_search, get_default_rule_engine
from api.routers import labels


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    # Built once and shared read-only by every request
    app.state.rule_engine = get_default_rule_engine()
    app.state.food_search = get_default_food_search()
    yield


app = FastAPI(
    title="Label Compliance API",
    description="Food label allergen, serving size, claim and market rule validation",
    version="1.0.0",
    lifespan=lifespan,
)

# Configure CORS for frontend - allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,  # Must be False when using wildcard origins
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(labels.router)


@app.get("/")
async def root():
    return {"message": "Label Compliance API is running", "docs": "/docs"}


@app.get("/api/health")
async def health():
    return {"status": "healthy"}
