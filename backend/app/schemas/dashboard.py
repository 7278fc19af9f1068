from __future__ import annotations

from pydantic import BaseModel


class InfoCard(BaseModel):
    label: str
    icon: str
    number_of_items: int
    variant: str = "default"


class QuizCardView(BaseModel):
    id: str
    title: str
    teacher_name: str
    description: str | None = None
    is_active: bool


class QuizListView(BaseModel):
    grid_class: str
    cards: list[QuizCardView]
    empty_message: str | None = None


class DashboardSection(BaseModel):
    title: str
    quiz_list: QuizListView


class DashboardView(BaseModel):
    # ok | empty | error | loading
    status: str
    skeleton: bool = False
    info_cards: list[InfoCard] = []
    sections: list[DashboardSection] = []
    empty_message: str | None = None
