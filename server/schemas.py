"""Pydantic request/response schemas for the FlashLearn API."""

from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, Field

from study.quality import Quality


# ---- Cards ----

class CardInput(BaseModel):
    card_id: Optional[str] = None
    prompt: str = Field(..., min_length=1, max_length=5000)
    answer: str = Field(..., min_length=1, max_length=5000)
    easiness: Optional[float] = None
    interval: Optional[int] = None
    repetitions: Optional[int] = None
    due_date: Optional[datetime] = None
    last_reviewed: Optional[datetime] = None


class CardSchema(BaseModel):
    card_id: str
    prompt: str
    answer: str
    easiness: float
    repetitions: int
    interval: int
    due_date: datetime
    last_reviewed: Optional[datetime] = None


# ---- Decks ----

class DeckCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default='', max_length=2000)
    tags: List[str] = Field(default_factory=list)
    cards: List[CardInput] = Field(default_factory=list)


class DeckImportRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field(default='', max_length=2000)
    tags: List[str] = Field(default_factory=list)
    cards_json: str = Field(..., max_length=2_000_000)


class DeckSummary(BaseModel):
    deck_id: str
    name: str
    description: str
    tags: List[str]
    card_count: int
    due_count: int
    updated_at: datetime
    is_community: bool
    author: Optional[str] = None
    likes: int


class DeckDetail(BaseModel):
    deck_id: str
    name: str
    description: str
    tags: List[str]
    cards: List[CardSchema]
    created_at: datetime
    updated_at: datetime
    is_community: bool
    author: Optional[str] = None
    likes: int


class DecksResponse(BaseModel):
    decks: List[DeckSummary]


class AddCardRequest(BaseModel):
    prompt: str = Field(..., min_length=1, max_length=5000)
    answer: str = Field(..., min_length=1, max_length=5000)


# ---- Review ----

class QueueResponse(BaseModel):
    deck_id: str
    queue: List[str]
    due_count: int


class DeckReviewRequest(BaseModel):
    card_id: str
    quality: Quality
    timestamp: Optional[datetime] = None


class DeckReviewResponse(BaseModel):
    deck_id: str
    quality: int
    label: str
    card: CardSchema


# ---- Sessions ----

class RateRequest(BaseModel):
    quality: Quality


class SessionCard(BaseModel):
    card_id: str
    prompt: str
    answer: Optional[str] = None  # hidden until revealed


class SessionResponse(BaseModel):
    session_id: str
    deck_id: str
    queue: List[str]
    remaining: int
    completed_count: int
    answer_revealed: bool
    is_complete: bool
    current_card: Optional[SessionCard] = None
    accepted: Optional[bool] = None
    reviewed_card: Optional[CardSchema] = None


# ---- Community ----

class CommunityResponse(BaseModel):
    decks: List[DeckSummary]
    tags: List[str]


class TagsResponse(BaseModel):
    tags: List[str]
