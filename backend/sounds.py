from pathlib import Path

from kivy.core.audio import SoundLoader

# Bundled cue files live next to the other app assets
SOUNDS_DIR = Path(__file__).resolve().parents[1] / "assets" / "sounds"


class SoundSystem:
    """Play short audio cues.

    Sounds are loaded lazily from ``assets/sounds`` and cached.  A missing
    file simply results in silence.
    """

    def __init__(self, base: Path = SOUNDS_DIR, volume: float = 1.0):
        self._base = Path(base)
        self._cache: dict[str, object] = {}
        self.volume = volume

    def _load(self, name: str):
        if name not in self._cache:
            path = self._base / f"{name}.wav"
            self._cache[name] = SoundLoader.load(str(path)) if path.exists() else None
        return self._cache[name]

    def play(self, name: str) -> None:
        """Play a named sound if available."""
        snd = self._load(name)
        if snd:
            snd.stop()
            snd.volume = self.volume
            snd.play()
