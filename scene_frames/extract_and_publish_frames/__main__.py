from pathlib import Path

from scene_frames.config import DATA_DIR, STORAGE_PROFILE, STORAGE_REGION
from scene_frames.utils import (
    FfmpegExtractor,
    StorageClient,
    check_missing_keys,
    load_config,
    setup_logging,
)

script_name = Path(__file__).parent.name
logger = setup_logging(script_name, DATA_DIR)

from scene_frames.extract_and_publish_frames import (
    ExtractionMode,
    FramePublishingContext,
    SceneDescriptor,
    extract_and_publish_frames,
    load_frame_descriptors,
)

logger.info("Starting frame extraction and publishing pipeline")

# Get script specific configs
CONFIG_PATH = Path(__file__).parent.resolve() / "config.yaml"

logger.info(f"Loading config from: {CONFIG_PATH}")
script_config = load_config(CONFIG_PATH)

required_keys = ["video_path", "mode"]
check_missing_keys(required_keys, script_config)

MODE = ExtractionMode(script_config["mode"])

VIDEO_PATH = DATA_DIR / script_config["video_path"]
FPS = float(script_config.get("fps", 23.976))
WINDOW_RADIUS = int(script_config.get("window_radius", 5))
CONCURRENCY = int(script_config.get("concurrency", 8))
TOTAL_FRAMES = script_config.get("total_frames")

TARGET_WIDTH = script_config.get("target_width")
IMAGE_EXTENSION = script_config.get("image_extension", "jpg")

PUSH_TO_CLOUD = bool(script_config.get("push_to_cloud", False))
DELETE_AFTER_UPLOAD = bool(script_config.get("delete_after_upload", True))
VIDEO_ID = script_config.get("video_id")

FFMPEG_BINARY = script_config.get("ffmpeg_binary", "ffmpeg")

# Frames are dumped next to the input video unless told otherwise
OUTPUT_FOLDER = script_config.get("output_folder")
OUTPUT_DIR = DATA_DIR / OUTPUT_FOLDER if OUTPUT_FOLDER else VIDEO_PATH.parent / "frames"

logger.info(f"Video path: {VIDEO_PATH}")
logger.info(f"Output directory: {OUTPUT_DIR}")

if not VIDEO_PATH.exists():
    logger.error(f"Video file does not exist at: {VIDEO_PATH}")
    raise FileNotFoundError(f"Video file does not exist at: {VIDEO_PATH}")

# Load scene or frame descriptors for windowed extraction
scenes, frames = [], []
if MODE is ExtractionMode.WINDOWED:
    check_missing_keys(["data_file"], script_config)

    DATA_PATH = DATA_DIR / script_config["data_file"]
    if not DATA_PATH.exists():
        logger.error(f"Descriptor file does not exist at: {DATA_PATH}")
        raise FileNotFoundError(f"Descriptor file does not exist at: {DATA_PATH}")

    descriptors = load_frame_descriptors(DATA_PATH)
    if descriptors and isinstance(descriptors[0], SceneDescriptor):
        scenes = descriptors
    else:
        frames = descriptors

# Build the storage client once for the whole run
storage = None
if PUSH_TO_CLOUD:
    check_missing_keys(["storage"], script_config)

    storage_config = dict(script_config["storage"])
    fs_kwargs = dict(storage_config.get("fs_kwargs") or {})
    if STORAGE_PROFILE:
        fs_kwargs.setdefault("profile", STORAGE_PROFILE)
    if STORAGE_REGION:
        fs_kwargs.setdefault("client_kwargs", {"region_name": STORAGE_REGION})
    storage_config["fs_kwargs"] = fs_kwargs

    storage = StorageClient.from_config(storage_config)

context = FramePublishingContext(
    video_path=VIDEO_PATH,
    output_dir=OUTPUT_DIR,
    fps=FPS,
    window_radius=WINDOW_RADIUS,
    concurrency=CONCURRENCY,
    mode=MODE,
    scenes=scenes,
    frames=frames,
    total_frames=TOTAL_FRAMES,
    target_width=TARGET_WIDTH,
    image_extension=IMAGE_EXTENSION,
    push_to_cloud=PUSH_TO_CLOUD,
    delete_after_upload=DELETE_AFTER_UPLOAD,
    video_id=VIDEO_ID,
    extractor=FfmpegExtractor(FFMPEG_BINARY),
    storage=storage,
)

# Task main function
summary = extract_and_publish_frames(context)

logger.info(
    f"Finished: {summary.succeeded_count} frames published, {summary.failed_count} failures"
)
