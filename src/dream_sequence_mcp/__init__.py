"""Dream sequence generation — scene queue, Veo client, and looped playback."""

__version__ = "0.1.0"
