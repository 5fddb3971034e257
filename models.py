"""Dataclasses for cache entries and the shaped API responses."""

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Optional


@dataclass
class CacheEntry:
    key: str
    value: dict
    expires_at: datetime

    def is_expired(self, now):
        return now >= self.expires_at


@dataclass
class Coordinates:
    lat: float
    lon: float

    def to_dict(self):
        return asdict(self)


@dataclass
class WeatherResult:
    """Current conditions, forecast and air quality for one city.

    ``current``, ``forecast`` and ``air_quality`` hold the provider payloads
    verbatim so clients can read whichever fields they render.
    """
    current: dict
    forecast: dict
    coordinates: Coordinates
    air_quality: Optional[dict] = None

    def to_dict(self):
        return {
            "current": self.current,
            "forecast": self.forecast,
            "airQuality": self.air_quality,
            "coordinates": self.coordinates.to_dict(),
        }


@dataclass
class CityResult:
    name: str
    country: str
    country_code: str
    population: Optional[int]
    latitude: float
    longitude: float
    timezone: Optional[str] = None
    elevation_meters: Optional[float] = None
    wiki_data_id: Optional[str] = None

    def to_dict(self):
        return {
            "name": self.name,
            "country": self.country,
            "countryCode": self.country_code,
            "population": self.population,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timezone": self.timezone,
            "elevationMeters": self.elevation_meters,
            "wikiDataId": self.wiki_data_id,
        }

    @classmethod
    def from_geodb(cls, d):
        return cls(
            name=d["name"],
            country=d.get("country", ""),
            country_code=d.get("countryCode", ""),
            population=d.get("population"),
            latitude=d.get("latitude"),
            longitude=d.get("longitude"),
            timezone=d.get("timezone"),
            elevation_meters=d.get("elevationMeters"),
            wiki_data_id=d.get("wikiDataId"),
        )


@dataclass
class ImageUrls:
    small: str
    regular: str
    full: str

    def to_dict(self):
        return asdict(self)


@dataclass
class Photographer:
    name: str
    username: str
    profile_url: str

    def to_dict(self):
        return {
            "name": self.name,
            "username": self.username,
            "profileUrl": self.profile_url,
        }


@dataclass
class ImageResult:
    id: str
    description: str
    urls: ImageUrls
    photographer: Photographer
    download_url: Optional[str] = None

    def to_dict(self):
        return {
            "id": self.id,
            "description": self.description,
            "urls": self.urls.to_dict(),
            "photographer": self.photographer.to_dict(),
            "downloadUrl": self.download_url,
        }

    @classmethod
    def from_unsplash(cls, photo, city):
        urls = photo.get("urls", {})
        user = photo.get("user", {})
        return cls(
            id=photo["id"],
            description=photo.get("description") or photo.get("alt_description") or f"{city} cityscape",
            urls=ImageUrls(
                small=urls.get("small"),
                regular=urls.get("regular"),
                full=urls.get("full"),
            ),
            photographer=Photographer(
                name=user.get("name"),
                username=user.get("username"),
                profile_url=user.get("links", {}).get("html"),
            ),
            download_url=photo.get("links", {}).get("download_location"),
        )
