from datetime import datetime, timezone

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger

from parkpal.assistant import ChatAssistant
from parkpal.config import settings
from parkpal.inventory import InventoryError, InventoryProvider, get_inventory
from parkpal.models import ChatRequest, ChatResponse, SearchRequest, SearchResponse
from parkpal.search import search_spaces

app = FastAPI(title="Parkpal Search API", version="0.1.0")

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_inventory_provider() -> InventoryProvider:
    return get_inventory(settings)


def get_assistant() -> ChatAssistant:
    return ChatAssistant(settings)


@app.on_event("startup")
def announce_inventory():
    provider = get_inventory(settings)
    logger.info(f"Parkpal API ready, inventory source: {provider.source}")
    if not settings.openrouter_api_key:
        logger.warning("OPENROUTER_API_KEY not set, chat replies will use the fallback text")


@app.get("/health")
def health(inventory: InventoryProvider = Depends(get_inventory_provider)):
    return {
        "status": "ok",
        "inventory_source": inventory.source,
        "llm_configured": bool(settings.openrouter_api_key),
    }


@app.get("/spaces", response_model=list[dict])
def list_spaces(
    available: bool = False,
    inventory: InventoryProvider = Depends(get_inventory_provider),
) -> list[dict]:
    """List the inventory; ``available=true`` keeps only spaces with free capacity."""
    try:
        spaces = inventory.fetch_available() if available else inventory.fetch_all()
    except InventoryError as e:
        logger.error(f"Inventory fetch failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))
    return [s.model_dump() for s in spaces]


@app.post("/spaces/search", response_model=SearchResponse)
def search(
    query: SearchRequest,
    inventory: InventoryProvider = Depends(get_inventory_provider),
) -> SearchResponse:
    """
    Interpret a free-text parking request and return the best matching spaces.

    - **message**: what the user typed
    - **location**: optional user coordinates; enables distance ranking
    """
    try:
        spaces = inventory.fetch_all()
    except InventoryError as e:
        logger.error(f"Inventory fetch failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    result = search_spaces(
        query.message,
        spaces,
        user_location=query.location,
        limit=settings.max_results,
    )
    return SearchResponse(
        constraints=result.constraints,
        total_found=result.candidates_found,
        spaces=[r.to_payload() for r in result.results],
    )


@app.post("/chat", response_model=ChatResponse)
def chat(
    body: ChatRequest,
    inventory: InventoryProvider = Depends(get_inventory_provider),
    assistant: ChatAssistant = Depends(get_assistant),
) -> ChatResponse:
    try:
        spaces = inventory.fetch_all()
    except InventoryError as e:
        logger.error(f"Inventory fetch failed: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    result = search_spaces(
        body.message,
        spaces,
        user_location=body.location,
        limit=settings.max_results,
    )
    reply = assistant.reply(body.message, body.conversation, result.results, body.location)

    payload = [r.to_payload() for r in result.results]
    return ChatResponse(
        message=reply,
        timestamp=datetime.now(timezone.utc).isoformat(),
        parking_spaces=payload,
        total_found=len(payload),
    )
