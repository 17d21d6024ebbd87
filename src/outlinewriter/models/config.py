"""User-editable generation configuration (tone, language, detail level)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from outlinewriter.config import DetailLevel, Settings


class UserConfigViolation(ValueError):
    """A config change the user is not allowed to make; state stays unchanged."""


class TonePreset(BaseModel):
    label: str
    value: str


TONE_PRESETS: tuple[TonePreset, ...] = (
    TonePreset(label="Học thuật", value="Chuyên nghiệp, học thuật"),
    TonePreset(label="Kể chuyện", value="Thân thiện, kể chuyện"),
    TonePreset(label="Hùng hồn", value="Thuyết phục, hùng hồn"),
    TonePreset(label="Cảm xúc", value="Nhẹ nhàng, cảm xúc"),
    TonePreset(label="Hài hước", value="Hài hước, dí dỏm"),
)

LANGUAGE_OPTIONS: tuple[str, ...] = ("Tiếng Việt", "English")


class GenerationConfig(BaseModel):
    """Process-wide generation preferences.

    ``tones`` is the active selection and is never empty. ``custom_tones`` are labels the
    user defined; they stay available after being deselected until explicitly removed.
    """

    tones: list[str] = Field(min_length=1)
    custom_tones: list[str] = Field(default_factory=list)
    language: str
    detail_level: DetailLevel = "standard"

    @field_validator("tones", "custom_tones")
    @classmethod
    def _dedupe(cls, value: list[str]) -> list[str]:
        out: list[str] = []
        for tone in value:
            tone = tone.strip()
            if tone and tone not in out:
                out.append(tone)
        return out

    @field_validator("tones")
    @classmethod
    def _non_empty(cls, value: list[str]) -> list[str]:
        if not value:
            raise ValueError("at least one tone must stay selected")
        return value

    @classmethod
    def from_settings(cls, settings: Settings) -> "GenerationConfig":
        return cls(
            tones=list(settings.default_tones),
            language=settings.default_language,
            detail_level=settings.default_detail_level,
        )

    @property
    def tone_descriptor(self) -> str:
        """All selected tones as one comma-separated descriptor."""

        return ", ".join(self.tones)

    @property
    def available_tones(self) -> list[str]:
        out = [p.value for p in TONE_PRESETS]
        out.extend(t for t in self.custom_tones if t not in out)
        return out

    def select_tone(self, tone: str) -> None:
        tone = tone.strip()
        if not tone:
            raise UserConfigViolation("tone must not be empty")
        if tone not in self.tones:
            self.tones.append(tone)

    def deselect_tone(self, tone: str) -> None:
        if tone not in self.tones:
            return
        if len(self.tones) == 1:
            raise UserConfigViolation("at least one tone must stay selected")
        self.tones.remove(tone)

    def toggle_tone(self, tone: str) -> None:
        if tone in self.tones:
            self.deselect_tone(tone)
        else:
            self.select_tone(tone)

    def add_custom_tone(self, tone: str) -> None:
        """Define a custom tone and select it."""

        tone = tone.strip()
        if not tone:
            raise UserConfigViolation("tone must not be empty")
        if tone not in self.custom_tones and tone not in (p.value for p in TONE_PRESETS):
            self.custom_tones.append(tone)
        self.select_tone(tone)

    def remove_custom_tone(self, tone: str) -> None:
        """Delete a custom tone from the available list and from the active selection."""

        if tone not in self.custom_tones:
            return
        if self.tones == [tone]:
            raise UserConfigViolation("cannot delete the only selected tone")
        self.custom_tones.remove(tone)
        if tone in self.tones:
            self.tones.remove(tone)

    def with_field(self, key: str, value: Any) -> "GenerationConfig":
        """Return a validated copy with one field replaced.

        Raises:
            UserConfigViolation: Unknown key or invalid value.
        """

        if key not in type(self).model_fields:
            raise UserConfigViolation(f"unknown config field: {key}")
        data = self.model_dump()
        data[key] = value
        try:
            return type(self).model_validate(data)
        except ValidationError as exc:
            raise UserConfigViolation(str(exc)) from exc
