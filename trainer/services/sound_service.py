"""Sound cues for board events."""

from typing import Any, Dict, Optional

from trainer.services.logging_service import LoggingService


class SoundPlayer:
    """Plays the board's sound cues.

    Sample playback belongs to the platform layer; this implementation
    records the cue in the log so that cues can be traced. Subclasses
    override _play() to produce audio.
    """

    MOVE = "move"
    CAPTURE = "capture"
    WRONG_MOVE = "wrong_move"
    FINISH_LINE = "finish_line"

    def __init__(self, config: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the sound player.

        Args:
            config: Configuration dictionary.
        """
        config = config or {}
        self.enabled = config.get('sound', {}).get('enabled', True)

    def play_move(self) -> None:
        self._dispatch(self.MOVE)

    def play_capture(self) -> None:
        self._dispatch(self.CAPTURE)

    def play_wrong_move(self) -> None:
        self._dispatch(self.WRONG_MOVE)

    def play_finish_line(self) -> None:
        self._dispatch(self.FINISH_LINE)

    def _dispatch(self, cue: str) -> None:
        if not self.enabled:
            return
        self._play(cue)

    def _play(self, cue: str) -> None:
        LoggingService.get_instance().debug(f"Sound cue: {cue}")
