"""wavesync: align a separately recorded audio track with a video's audio."""

__version__ = "0.1.0"
