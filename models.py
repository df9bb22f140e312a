"""
Data models for places, weather snapshots and rendered weather views.
"""

from __future__ import annotations
from dataclasses import dataclass, asdict
from datetime import date
from typing import Optional
import math


def round_half_up(value: float) -> int:
    """Round halves up: 21.5 -> 22, 22.5 -> 23, -2.5 -> -2. Built-in round() would give 22 for 22.5."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class PlaceCandidate:
    name: str
    latitude: float
    longitude: float
    admin1: Optional[str] = None
    country: Optional[str] = None

    @classmethod
    def from_result(cls, result: dict) -> PlaceCandidate:
        """Build from one record of the geocoding `results` list."""
        return cls(
            name=result.get("name", ""),
            latitude=float(result["latitude"]),
            longitude=float(result["longitude"]),
            admin1=result.get("admin1") or None,
            country=result.get("country") or None,
        )

    @property
    def label(self) -> str:
        parts = [self.name]
        if self.admin1:
            parts.append(self.admin1)
        if self.country:
            parts.append(self.country)
        return ", ".join(parts)

    def to_dict(self) -> dict:
        d = asdict(self)
        d["label"] = self.label
        return d


@dataclass(frozen=True)
class WeatherSnapshot:
    temperature: float
    apparent_temperature: float
    relative_humidity: float
    wind_speed: float
    weather_code: int
    is_day: bool = True
    precipitation: float = 0.0

    @classmethod
    def from_current(cls, current: dict) -> WeatherSnapshot:
        """Build from the forecast response's `current` block."""
        return cls(
            temperature=current["temperature_2m"],
            apparent_temperature=current["apparent_temperature"],
            relative_humidity=current["relative_humidity_2m"],
            wind_speed=current["wind_speed_10m"],
            weather_code=int(current["weather_code"]),
            is_day=bool(current.get("is_day", 1)),
            precipitation=current.get("precipitation", 0.0),
        )


@dataclass(frozen=True)
class WeatherView:
    city_label: str
    date_label: str
    temperature: str
    description: str
    feels_like: str
    humidity: str
    wind_speed: str

    @classmethod
    def build(cls, snapshot: WeatherSnapshot, name: str, country: Optional[str],
              description: str, today: Optional[date] = None) -> WeatherView:
        today = today or date.today()
        return cls(
            city_label=f"{name}, {country}" if country else name,
            date_label=f"{today:%A}, {today:%b} {today.day}",
            temperature=str(round_half_up(snapshot.temperature)),
            description=description,
            feels_like=f"{round_half_up(snapshot.apparent_temperature)}°C",
            humidity=f"{_number(snapshot.relative_humidity)}%",
            wind_speed=f"{_number(snapshot.wind_speed)} km/h",
        )

    def to_dict(self) -> dict:
        return asdict(self)


def _number(value: float) -> str:
    # 65.0 -> "65", 12.3 -> "12.3"
    if float(value).is_integer():
        return str(int(value))
    return str(value)
