from __future__ import annotations

import logging
import os

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from starlette.middleware.sessions import SessionMiddleware

from .auth.dependencies import get_current_user, require_admin, require_user
from .auth.models import LoginRequest, SignUpRequest
from .auth.session import AuthEvent, SessionProvider, get_session_provider
from .auth.users import AccountExists, authenticate, change_username, sign_up
from .chat.assistant import GREETING, chat_reply, update_conversation_state
from .chat.models import ChatRequest, ChatResponse, ChatResponseType, ConversationState
from .location.geocoding import (
    UNSUPPORTED_MESSAGE,
    describe_geolocation_error,
    reverse_geocode,
)
from .location.models import LocationResolveRequest, LocationResolveResponse
from .search.classifier import describe_extracted_preferences, process_natural_language_query
from .search.models import (
    PreferenceUpdate,
    QueryRequest,
    QueryResponse,
    Restaurant,
    SearchResponse,
    UserPreferences,
    VoiceQueryRequest,
    apply_preference_update,
)
from .search.options import ALLERGY_OPTIONS, CUISINE_TYPES, DIETARY_OPTIONS, PRICE_RANGES
from .search.service import (
    get_restaurant_details,
    remember_search,
    search_restaurants,
    summarize_results,
)
from .storage.feedback import feedback_stats, submit_feedback
from .storage.models import (
    AppFeedbackRequest,
    AppFeedbackResponse,
    ProfileOut,
    ProfileUpdate,
    RestaurantTagsUpdate,
    SavedRestaurantOut,
    SavedStatus,
    SaveRequest,
    TagCreate,
    TagOut,
)
from .storage.profiles import get_profile, update_profile
from .storage.rows import RowNotFound, StorageError, UniqueViolation
from .storage.saved import is_saved, list_saved, save_restaurant, toggle_saved, unsave_restaurant
from .storage.tags import (
    InvalidTagName,
    create_tag,
    delete_tag,
    get_restaurant_tags,
    list_tags,
    set_restaurant_tags,
)

logger = logging.getLogger(__name__)

app = FastAPI(title="DineFine AI Restaurant Finder API", version="1.0.0")
app.add_middleware(
    SessionMiddleware,
    secret_key=os.environ.get("SESSION_SECRET", "dinefine-secret-change-in-production"),
)

SPEECH_UNSUPPORTED_MESSAGE = "Speech recognition is not supported in your browser"
SPEECH_ERROR_MESSAGE = "Error occurred in speech recognition"


# ── Session state helpers ────────────────────────────────────────────────


def _load_preferences(request: Request) -> UserPreferences:
    raw = request.session.get("preferences")
    if not raw:
        return UserPreferences()
    try:
        return UserPreferences.model_validate(raw)
    except ValueError:
        logger.warning("Discarding unreadable session preferences", exc_info=True)
        return UserPreferences()


def _store_preferences(request: Request, preferences: UserPreferences) -> None:
    request.session["preferences"] = preferences.model_dump(mode="json")


def _load_profile_preferences(event: AuthEvent, request: Request, user: dict) -> None:
    """Seed the session's dietary/allergy filters from the user's profile."""
    if event is not AuthEvent.signed_in:
        logger.info("User %s signed out", user.get("username"))
        return
    profile = get_profile(user["id"])
    if not profile:
        return
    preferences = apply_preference_update(
        _load_preferences(request),
        PreferenceUpdate(
            dietary_restrictions=profile["dietary_preferences"],
            allergies=profile["allergies"],
        ),
    )
    _store_preferences(request, preferences)


get_session_provider().subscribe(_load_profile_preferences)


async def _run_search(request: Request, preferences: UserPreferences) -> list[Restaurant]:
    results = await search_restaurants(preferences)
    request.session["previous_searches"] = remember_search(
        request.session.get("previous_searches", []), preferences,
    )
    return results


def _saved_out(row: dict) -> SavedRestaurantOut:
    return SavedRestaurantOut(
        id=row["id"],
        restaurant_id=row["restaurant_id"],
        restaurant=Restaurant.model_validate(row["restaurant_data"]),
        created_at=row["created_at"],
    )


# ── Public endpoints ─────────────────────────────────────────────────────


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/metadata")
def metadata() -> dict:
    return {
        "dietary_options": DIETARY_OPTIONS,
        "allergy_options": ALLERGY_OPTIONS,
        "cuisine_types": CUISINE_TYPES,
        "price_ranges": PRICE_RANGES,
        "greeting": GREETING,
    }


@app.post("/app-feedback", response_model=AppFeedbackResponse)
def app_feedback(
    body: AppFeedbackRequest,
    user: dict | None = Depends(get_current_user),
) -> AppFeedbackResponse:
    try:
        submit_feedback(
            feedback_type=body.feedback_type,
            subject=body.subject.strip(),
            message=body.message.strip(),
            user_id=user["id"] if user else None,
            rating=body.rating,
            user_email=body.user_email or (user["email"] if user else None),
        )
    except StorageError:
        logger.warning("Failed to store app feedback", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to submit feedback. Please try again.")
    return AppFeedbackResponse(
        status="recorded",
        message="Thank you! Your feedback has been submitted.",
    )


# ── Auth endpoints ───────────────────────────────────────────────────────


@app.post("/auth/signup", status_code=201)
def signup(
    body: SignUpRequest,
    request: Request,
    sessions: SessionProvider = Depends(get_session_provider),
) -> dict:
    if not body.accept_terms:
        raise HTTPException(status_code=400, detail="You must accept the Terms of Service")
    try:
        user = sign_up(body.email, body.password, body.username, body.phone_number)
    except (AccountExists, UniqueViolation):
        raise HTTPException(status_code=409, detail="An account with this email or username already exists")
    sessions.sign_in(request, user)
    return {"status": "ok", "user": user, "is_new_user": True}


@app.post("/auth/login")
def login(
    body: LoginRequest,
    request: Request,
    sessions: SessionProvider = Depends(get_session_provider),
) -> dict:
    user = authenticate(body.username, body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    sessions.sign_in(request, user)
    return {"status": "ok", "user": user}


@app.post("/auth/logout")
def logout(
    request: Request,
    sessions: SessionProvider = Depends(get_session_provider),
) -> dict:
    sessions.sign_out(request)
    return {"status": "logged_out"}


@app.get("/auth/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return user


# ── Preferences & search ─────────────────────────────────────────────────


@app.get("/preferences", response_model=UserPreferences)
def get_preferences(request: Request, user: dict = Depends(require_user)) -> UserPreferences:
    return _load_preferences(request)


@app.patch("/preferences", response_model=UserPreferences)
def patch_preferences(
    body: PreferenceUpdate,
    request: Request,
    user: dict = Depends(require_user),
) -> UserPreferences:
    preferences = apply_preference_update(_load_preferences(request), body)
    _store_preferences(request, preferences)
    return preferences


@app.delete("/preferences", response_model=UserPreferences)
def reset_preferences(request: Request, user: dict = Depends(require_user)) -> UserPreferences:
    request.session.pop("preferences", None)
    _load_profile_preferences(AuthEvent.signed_in, request, user)
    return _load_preferences(request)


@app.post("/search", response_model=SearchResponse)
async def search(
    request: Request,
    body: UserPreferences | None = None,
    user: dict = Depends(require_user),
) -> SearchResponse:
    preferences = body if body is not None else _load_preferences(request)
    _store_preferences(request, preferences)
    results = await _run_search(request, preferences)
    return SearchResponse(results=results, message=summarize_results(results))


@app.get("/search/history")
def search_history(request: Request, user: dict = Depends(require_user)) -> dict:
    return {"previous_searches": request.session.get("previous_searches", [])}


async def _answer_query(request: Request, text: str, run_search: bool) -> QueryResponse:
    extracted = process_natural_language_query(text)
    preferences = apply_preference_update(_load_preferences(request), extracted)
    preferences = preferences.model_copy(update={"search_query": text})
    _store_preferences(request, preferences)

    results = await _run_search(request, preferences) if run_search else None
    return QueryResponse(
        reply=describe_extracted_preferences(text, extracted),
        extracted=extracted,
        preferences=preferences,
        results=results,
    )


@app.post("/query", response_model=QueryResponse)
async def query(
    body: QueryRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> QueryResponse:
    return await _answer_query(request, body.query, body.search)


@app.post("/query/voice", response_model=QueryResponse)
async def voice_query(
    body: VoiceQueryRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> QueryResponse:
    if not body.supported:
        return QueryResponse(
            reply=SPEECH_UNSUPPORTED_MESSAGE,
            preferences=_load_preferences(request),
            error="speech_unsupported",
        )
    transcript = (body.transcript or "").strip()
    if body.recognition_error or not transcript:
        return QueryResponse(
            reply=SPEECH_ERROR_MESSAGE,
            preferences=_load_preferences(request),
            error="speech_recognition_failed",
        )
    return await _answer_query(request, transcript, body.search)


@app.get("/restaurants/{restaurant_id}", response_model=Restaurant)
async def restaurant_details(
    restaurant_id: str,
    user: dict = Depends(require_user),
) -> Restaurant:
    restaurant = await get_restaurant_details(restaurant_id)
    if restaurant is None:
        raise HTTPException(status_code=404, detail="Restaurant not found")
    return restaurant


# ── Chat endpoint ────────────────────────────────────────────────────────


@app.post("/chat", response_model=ChatResponse)
async def chat(
    body: ChatRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> ChatResponse:
    try:
        raw_state = request.session.get("chat_state")
        conv_state = ConversationState(**raw_state) if raw_state else ConversationState()
    except (TypeError, ValueError):
        conv_state = ConversationState()

    # The LLM client is blocking; keep it off the event loop.
    reply = await run_in_threadpool(chat_reply, body.message)

    preferences = _load_preferences(request)
    if reply.update.model_fields_set:
        preferences = apply_preference_update(preferences, reply.update, merge_lists=True)
        _store_preferences(request, preferences)

    results = None
    if reply.trigger_search:
        results = await _run_search(
            request, preferences.model_copy(update={"search_query": ""}),
        )

    conv_state = update_conversation_state(conv_state, body.message, reply.message)
    request.session["chat_state"] = conv_state.model_dump()

    return ChatResponse(
        type=ChatResponseType.results if reply.trigger_search else ChatResponseType.reply,
        message=reply.message,
        preferences=preferences,
        results=results,
    )


# ── Location ─────────────────────────────────────────────────────────────


@app.post("/location/resolve", response_model=LocationResolveResponse)
def resolve_location(
    body: LocationResolveRequest,
    request: Request,
    user: dict = Depends(require_user),
) -> LocationResolveResponse:
    preferences = _load_preferences(request)

    if body.coordinates is None:
        message = UNSUPPORTED_MESSAGE if not body.supported else describe_geolocation_error(body.error)
        _store_preferences(request, preferences.model_copy(update={"coordinates": None}))
        return LocationResolveResponse(resolved=False, message=message)

    coords = body.coordinates
    address = reverse_geocode(coords.lat, coords.lng)
    _store_preferences(
        request,
        preferences.model_copy(update={"coordinates": coords, "use_current_location": True}),
    )
    return LocationResolveResponse(resolved=True, address=address, coordinates=coords)


# ── Profile ──────────────────────────────────────────────────────────────


@app.get("/profile", response_model=ProfileOut)
def read_profile(user: dict = Depends(require_user)) -> ProfileOut:
    profile = get_profile(user["id"])
    if profile is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    return ProfileOut.model_validate(profile)


@app.put("/profile", response_model=ProfileOut)
def write_profile(
    body: ProfileUpdate,
    request: Request,
    user: dict = Depends(require_user),
) -> ProfileOut:
    changes = body.model_dump(exclude_unset=True)
    username = changes.pop("username", None)
    try:
        if username:
            change_username(user["id"], username)
        profile = update_profile(user["id"], **changes)
    except (AccountExists, UniqueViolation):
        raise HTTPException(status_code=409, detail="This username is already taken")
    except RowNotFound:
        raise HTTPException(status_code=404, detail="Profile not found")
    except StorageError:
        logger.warning("Failed to update profile for %s", user["id"], exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update profile")

    if username:
        request.session["user"] = {**user, "username": profile["username"]}
    # Keep the active search filters in step with the profile.
    _load_profile_preferences(AuthEvent.signed_in, request, user)
    return ProfileOut.model_validate(profile)


@app.put("/profile/preferences", response_model=ProfileOut)
def write_profile_preferences(
    body: ProfileUpdate,
    request: Request,
    user: dict = Depends(require_user),
) -> ProfileOut:
    """Save dietary preferences and allergies; other profile fields are ignored.

    Without a body the current session filters are saved.
    """
    changes = body.model_dump(include={"dietary_preferences", "allergies"}, exclude_unset=True)
    if not changes:
        preferences = _load_preferences(request)
        changes = {
            "dietary_preferences": preferences.dietary_restrictions,
            "allergies": preferences.allergies,
        }
    try:
        profile = update_profile(user["id"], **changes)
    except RowNotFound:
        raise HTTPException(status_code=404, detail="Profile not found")
    except StorageError:
        logger.warning("Failed to save preferences for %s", user["id"], exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to save preferences")

    _load_profile_preferences(AuthEvent.signed_in, request, user)
    return ProfileOut.model_validate(profile)


# ── Saved list ───────────────────────────────────────────────────────────


@app.get("/saved", response_model=list[SavedRestaurantOut])
def saved_list(
    tag_id: str | None = None,
    user: dict = Depends(require_user),
) -> list[SavedRestaurantOut]:
    try:
        rows = list_saved(user["id"], tag_id=tag_id)
    except StorageError:
        logger.warning("Failed to load saved restaurants", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to load saved restaurants")
    return [_saved_out(r) for r in rows]


@app.get("/saved/{restaurant_id}", response_model=SavedStatus)
def saved_status(restaurant_id: str, user: dict = Depends(require_user)) -> SavedStatus:
    return SavedStatus(restaurant_id=restaurant_id, saved=is_saved(user["id"], restaurant_id))


@app.post("/saved", response_model=SavedStatus, status_code=201)
def save(body: SaveRequest, user: dict = Depends(require_user)) -> SavedStatus:
    try:
        save_restaurant(user["id"], body.restaurant)
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="Restaurant is already in your saved list")
    except StorageError:
        logger.warning("Failed to save restaurant", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update saved status")
    return SavedStatus(restaurant_id=body.restaurant.id, saved=True)


@app.post("/saved/toggle", response_model=SavedStatus)
def toggle_save(body: SaveRequest, user: dict = Depends(require_user)) -> SavedStatus:
    try:
        saved = toggle_saved(user["id"], body.restaurant)
    except StorageError:
        logger.warning("Failed to toggle saved status", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update saved status")
    return SavedStatus(restaurant_id=body.restaurant.id, saved=saved)


@app.delete("/saved/{restaurant_id}", response_model=SavedStatus)
def unsave(restaurant_id: str, user: dict = Depends(require_user)) -> SavedStatus:
    try:
        removed = unsave_restaurant(user["id"], restaurant_id)
    except StorageError:
        logger.warning("Failed to remove saved restaurant", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to remove restaurant")
    if not removed:
        raise HTTPException(status_code=404, detail="Restaurant is not in your saved list")
    return SavedStatus(restaurant_id=restaurant_id, saved=False)


# ── Tags ─────────────────────────────────────────────────────────────────


@app.get("/tags", response_model=list[TagOut])
def tags(user: dict = Depends(require_user)) -> list[TagOut]:
    return [TagOut.model_validate(t) for t in list_tags(user["id"])]


@app.post("/tags", response_model=TagOut, status_code=201)
def new_tag(body: TagCreate, user: dict = Depends(require_user)) -> TagOut:
    try:
        tag = create_tag(user["id"], body.tag_name, body.color)
    except InvalidTagName as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except UniqueViolation:
        raise HTTPException(status_code=409, detail="A tag with this name already exists")
    except StorageError:
        logger.warning("Failed to create tag", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to create tag")
    return TagOut.model_validate(tag)


@app.delete("/tags/{tag_id}")
def remove_tag(tag_id: str, user: dict = Depends(require_user)) -> dict:
    if not delete_tag(user["id"], tag_id):
        raise HTTPException(status_code=404, detail="Tag not found")
    return {"status": "deleted"}


@app.get("/restaurants/{restaurant_id}/tags", response_model=list[TagOut])
def restaurant_tags(restaurant_id: str, user: dict = Depends(require_user)) -> list[TagOut]:
    return [TagOut.model_validate(t) for t in get_restaurant_tags(user["id"], restaurant_id)]


@app.put("/restaurants/{restaurant_id}/tags", response_model=list[TagOut])
def update_restaurant_tags(
    restaurant_id: str,
    body: RestaurantTagsUpdate,
    user: dict = Depends(require_user),
) -> list[TagOut]:
    try:
        updated = set_restaurant_tags(user["id"], restaurant_id, body.tag_ids)
    except StorageError:
        logger.warning("Failed to update tags for %s", restaurant_id, exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update tags")
    return [TagOut.model_validate(t) for t in updated]


# ── Admin endpoints ──────────────────────────────────────────────────────


@app.get("/app-feedback/stats")
def app_feedback_stats(user: dict = Depends(require_admin)) -> dict:
    return feedback_stats()
