from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class MostPopularMovie(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    title: str = Field(alias="fullTitle")
    rating: float = Field(0.0, alias="imDbRating")
    image_url: str = Field(alias="image")

    @field_validator("rating", mode="before")
    @classmethod
    def parse_rating(cls, value) -> float:
        # Upstream sends ratings as strings and sometimes leaves them empty
        try:
            return float(value)
        except (TypeError, ValueError):
            return 0.0

    @property
    def resized_image_url(self) -> str:
        """Poster URL rewritten to a 600px wide rendition."""
        return self.image_url.split("._")[0] + "._V0_UX600_.jpg"


class MostPopularMovies(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    error_message: Optional[str] = Field("", alias="errorMessage")
    items: List[MostPopularMovie] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)
