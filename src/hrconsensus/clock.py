"""Identifier and timestamp sources shared by the stores."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Callable

import pendulum

Clock = Callable[[], datetime]


def utcnow() -> datetime:
    return pendulum.now("UTC")


def new_id() -> str:
    return uuid.uuid4().hex
