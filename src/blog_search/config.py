"""Configuration for corpus building and index loading."""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchConfig(BaseModel):
    """Settings shared by the corpus builder and the search index client."""

    model_config = ConfigDict(frozen=True)

    posts_dir: Path = Field(default=Path("_posts"), description="Directory holding post source files")
    output_dir: Path = Field(default=Path("_site"), description="Build output directory")
    artifact_name: str = Field(default="search.json", description="File name of the corpus artifact")
    base_url: str = Field(default="", description="Prefix applied to generated post URLs")
    site_url: str = Field(default="http://localhost:4000", description="Origin the client resolves corpus_url against")
    corpus_url: str = Field(default="/search.json", description="URL the client fetches the corpus from")
    fetch_timeout: float = Field(default=10.0, gt=0, description="Corpus fetch timeout in seconds")
    max_results: int | None = Field(default=None, ge=1, description="Optional cap on results per query")

    @field_validator("artifact_name")
    @classmethod
    def _check_artifact_name(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            msg = f"artifact_name must be a plain file name: {value!r}"
            raise ValueError(msg)
        return value

    @field_validator("base_url")
    @classmethod
    def _strip_base_url(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def artifact_path(self) -> Path:
        """Full path of the corpus artifact inside the output directory."""
        return self.output_dir / self.artifact_name
