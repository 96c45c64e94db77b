"""Achievement names the rewards worker can grant. All must exist in the ledger catalog."""

ACHIEVEMENT_SEARCHER = "generic-searcher"
ACHIEVEMENT_ARNS_SEARCHER = "arns-searcher"
ACHIEVEMENT_IMAGE_SEARCHER = "image-searcher"
ACHIEVEMENT_AUDIO_SEARCHER = "audio-searcher"
ACHIEVEMENT_VIDEO_SEARCHER = "video-searcher"

REQUIRED_ACHIEVEMENTS: tuple[str, ...] = (
    ACHIEVEMENT_SEARCHER,
    ACHIEVEMENT_VIDEO_SEARCHER,
    ACHIEVEMENT_IMAGE_SEARCHER,
    ACHIEVEMENT_ARNS_SEARCHER,
    ACHIEVEMENT_AUDIO_SEARCHER,
)
