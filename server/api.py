"""FastAPI server exposing the wardrobe to the device's front end."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests
from fastapi import FastAPI, HTTPException, Query, Request, Response
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from agents.try_on_agent import TryOnMode
from logic.prompts import DEFAULT_OCCASION
from logic.wardrobe_filter import CategoryGroup, filter_items
from models.advice import ClothingAnalysis
from models.clothing_item import ClothingItem
from models.taxonomy import Formality, Gender, Season, WeatherCondition
from models.weather import WeatherSnapshot
from wardrobe_app.app import WardrobeApp
from wardrobe_app.logging_config import configure_logging


GOOGLE_API_ORIGIN = "https://generativelanguage.googleapis.com"
FORWARD_PREFIX = "/google-api"
_HOP_BY_HOP = {
    "host",
    "connection",
    "keep-alive",
    "content-length",
    "content-encoding",
    "transfer-encoding",
    "upgrade",
}


class ImagePayload(BaseModel):
    image: str = Field(..., min_length=1, description="Data URL or bare base64")


class NewItemRequest(ImagePayload):
    """Photo plus the tags the user confirmed (blank fields take defaults)."""

    category: str = ""
    color: str = ""
    season: Optional[Season] = None
    formality: Optional[Formality] = None
    description: str = ""


class WornRequest(BaseModel):
    item_ids: List[str]


class ProfileUpdate(BaseModel):
    name: Optional[str] = None
    gender: Optional[Gender] = None
    height: Optional[str] = None
    weight: Optional[str] = None
    avatar: Optional[str] = None


class TryOnPhotoRequest(BaseModel):
    image: Optional[str] = None


class WeatherPayload(BaseModel):
    city: str
    temperature: int
    condition: WeatherCondition
    description: str


class RecommendRequest(BaseModel):
    occasion: str = DEFAULT_OCCASION
    weather: Optional[WeatherPayload] = None


class TryOnRequest(BaseModel):
    item_ids: List[str]
    mode: Optional[TryOnMode] = None
    height: Optional[str] = None
    weight: Optional[str] = None


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1)


def _item_json(item: ClothingItem) -> Dict[str, Any]:
    return item.to_storage()


def _weather_json(snapshot: WeatherSnapshot) -> Dict[str, Any]:
    return {
        "city": snapshot.city,
        "temperature": snapshot.temperature,
        "condition": snapshot.condition.value,
        "description": snapshot.description,
    }


def create_app(wardrobe: WardrobeApp) -> FastAPI:
    """Build the HTTP surface around one owned ``WardrobeApp``."""

    api = FastAPI(title="Smart Wardrobe", version="0.1.0")
    store = wardrobe.store

    @api.get("/healthz")
    async def healthcheck() -> dict:
        return {
            "status": "ok",
            "service": "smart-wardrobe",
            "environment": wardrobe.config.environment or "local",
            "model": wardrobe.config.text_model,
        }

    @api.get("/items")
    def list_items(group: CategoryGroup = CategoryGroup.ALL, q: str = "") -> List[Dict[str, Any]]:
        return [_item_json(item) for item in filter_items(store.items, group, q)]

    @api.get("/items/{item_id}")
    def get_item(item_id: str) -> Dict[str, Any]:
        item = store.get_item(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail="item not found")
        return _item_json(item)

    @api.post("/items/analyze")
    def analyze_item(payload: ImagePayload) -> Dict[str, Any]:
        analysis = wardrobe.analyze_item(payload.image)
        return analysis.model_dump(mode="json")

    @api.post("/items", status_code=201)
    def add_item(payload: NewItemRequest) -> Dict[str, Any]:
        analysis = ClothingAnalysis(
            category=payload.category,
            color=payload.color,
            season=payload.season,
            formality=payload.formality,
            description=payload.description,
        )
        return _item_json(wardrobe.save_item(payload.image, analysis))

    @api.delete("/items/{item_id}", status_code=204)
    def delete_item(item_id: str) -> Response:
        store.remove(item_id)
        return Response(status_code=204)

    @api.post("/items/worn")
    def mark_worn(payload: WornRequest) -> List[Dict[str, Any]]:
        return [_item_json(item) for item in wardrobe.confirm_worn(payload.item_ids)]

    @api.get("/stats")
    def stats() -> Dict[str, int]:
        summary = wardrobe.stats()
        return {
            "total": summary.total,
            "worn": summary.worn,
            "utilization_percent": summary.utilization_percent,
        }

    @api.get("/profile")
    def get_profile() -> Dict[str, Any]:
        return store.profile.to_storage()

    @api.patch("/profile")
    def update_profile(payload: ProfileUpdate) -> Dict[str, Any]:
        changes = payload.model_dump(exclude_unset=True)
        return store.update_profile(changes).to_storage()

    @api.put("/session/try-on-photo", status_code=204)
    def set_try_on_photo(payload: TryOnPhotoRequest) -> Response:
        store.try_on_photo = payload.image or None
        return Response(status_code=204)

    @api.get("/weather/local")
    def local_weather() -> Dict[str, Any]:
        return _weather_json(wardrobe.local_weather())

    @api.get("/weather/city")
    def city_weather(q: str = Query(..., min_length=1)) -> Dict[str, Any]:
        snapshot = wardrobe.city_weather(q)
        if snapshot is None:
            raise HTTPException(status_code=404, detail="未找到该城市，请尝试输入全名（如：London 或 上海）。")
        return _weather_json(snapshot)

    @api.post("/outfits/recommend")
    def recommend_outfit(payload: RecommendRequest) -> Dict[str, Any]:
        weather = WeatherSnapshot(**payload.weather.model_dump()) if payload.weather else None
        recommendation = wardrobe.recommend_outfit(payload.occasion, weather)
        return {
            "items": [_item_json(item) for item in recommendation.items],
            "reasoning": recommendation.reasoning,
        }

    @api.post("/outfits/try-on")
    def try_on(payload: TryOnRequest) -> Dict[str, str]:
        if not store.items_by_ids(payload.item_ids):
            raise HTTPException(status_code=400, detail="没有有效的衣物可供试穿")
        overrides = {
            key: value
            for key, value in (("height", payload.height), ("weight", payload.weight))
            if value is not None
        }
        image = wardrobe.render_try_on(payload.item_ids, payload.mode, overrides)
        if not image:
            raise HTTPException(status_code=503, detail="AI 生成图片服务暂时繁忙，请稍后再试。")
        return {"image": image}

    @api.post("/shopping/evaluate")
    def evaluate_purchase(payload: ImagePayload) -> Dict[str, Any]:
        return wardrobe.evaluate_purchase(payload.image).model_dump(by_alias=True)

    @api.post("/chat")
    def chat(payload: ChatRequest) -> Dict[str, str]:
        return {"reply": wardrobe.chat(payload.message)}

    @api.api_route(
        FORWARD_PREFIX + "/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
    )
    async def forward_to_google(path: str, request: Request) -> Response:
        """Replay the request against the Gemini API; only the URL changes."""

        target = f"{GOOGLE_API_ORIGIN}/{path}"
        if request.url.query:
            target = f"{target}?{request.url.query}"
        headers = {key: value for key, value in request.headers.items() if key.lower() not in _HOP_BY_HOP}
        body = await request.body()
        upstream = await run_in_threadpool(
            requests.request,
            request.method,
            target,
            headers=headers,
            data=body or None,
            timeout=120,
        )
        response_headers = {
            key: value for key, value in upstream.headers.items() if key.lower() not in _HOP_BY_HOP
        }
        return Response(content=upstream.content, status_code=upstream.status_code, headers=response_headers)

    return api


def get_app() -> FastAPI:
    """ASGI factory: configure logging and build the default app."""

    configure_logging()
    return create_app(WardrobeApp())


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("server.api:get_app", factory=True, host="0.0.0.0", port=8080, reload=False)
