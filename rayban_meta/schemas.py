"""Pydantic schemas for presets, requests and results."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class CameraType(StrEnum):
    """Which camera of the glasses a recording claims to come from."""

    MAIN = "main"
    FRONT = "front"


class QualityTier(StrEnum):
    """Transcoding quality tier."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    ULTRA = "ultra"


class Compatibility(StrEnum):
    """How well a source video suits the glasses' playback profile."""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


# === Presets ===


class LocationPreset(BaseModel):
    """Named GPS position. Values are decimal strings as written to the file."""

    model_config = ConfigDict(frozen=True)

    latitude: str
    longitude: str
    altitude: str


class CameraPreset(BaseModel):
    """Default tag values for one camera of the glasses."""

    model_config = ConfigDict(frozen=True)

    make: str
    model: str
    software: str
    lens_model: str
    camera_model_name: str
    device_type: str
    capture_mode: str
    audio_channels: int
    microphone: str
    field_of_view: str
    image_stabilization: str
    default_comment: str


class DeviceProfile(BaseModel):
    """Transcoder defaults tied to a camera type."""

    model_config = ConfigDict(frozen=True)

    name: str  # stories, meta
    resolution: str  # 1920x1080
    fps: int
    bitrate: str  # 8000k
    format: str = "mp4"


class QualitySettings(BaseModel):
    """x264 settings for a quality tier."""

    model_config = ConfigDict(frozen=True)

    crf: int
    preset: str  # x264 speed preset


# === Request Models ===


class RayBanConfig(BaseModel):
    """What the caller wants stamped. Every field is optional."""

    front_camera: bool = False
    has_audio: bool = True
    custom_date: str | None = None  # YYYY:MM:DD HH:MM:SS, not validated
    latitude: str | None = None
    longitude: str | None = None
    altitude: str | None = None
    location_name: str | None = None
    custom_comment: str | None = None

    @property
    def camera_type(self) -> CameraType:
        return CameraType.FRONT if self.front_camera else CameraType.MAIN


class ProcessingOptions(BaseModel):
    """Transcoding options. Explicit values override tier and device defaults."""

    quality: QualityTier = QualityTier.MEDIUM
    resolution: str | None = None
    fps: float | None = None
    bitrate: str | None = None
    preset: str | None = None  # overrides the tier's x264 preset
    stabilize: bool = False
    add_watermark: bool = False


# === Response Models ===


class RayBanMetadata(BaseModel):
    """Full set of tags resolved for one invocation."""

    model_config = ConfigDict(frozen=True)

    make: str
    model: str
    software: str
    lens_model: str
    create_date: str
    modify_date: str
    camera_model_name: str
    device_type: str
    capture_mode: str
    audio_channels: int
    microphone: str
    field_of_view: str
    image_stabilization: str
    comment: str
    gps_latitude: str
    gps_longitude: str
    gps_altitude: str
    gps_latitude_ref: str  # N or S
    gps_longitude_ref: str  # E or W


class VideoFile(BaseModel):
    """Video found while scanning a directory."""

    path: str
    name: str
    size: int  # bytes
    extension: str


class VideoInfo(BaseModel):
    """Basic stream information from ffprobe."""

    duration: float
    width: int
    height: int
    fps: float
    bitrate: int  # bps
    codec: str
    size: int  # bytes


class VideoAnalysis(BaseModel):
    """Compatibility report for a source video."""

    info: VideoInfo
    recommendations: list[str] = Field(default_factory=list)
    compatibility: Compatibility = Compatibility.EXCELLENT


class ProcessResult(BaseModel):
    """Outcome of a single-file operation."""

    success: bool
    output_path: str | None = None
    error: str | None = None
    error_type: str | None = None  # exception class name on failure

    def __bool__(self) -> bool:
        return self.success


class FramesResult(ProcessResult):
    """Outcome of a frame extraction; output_path is the frames directory."""

    frames: list[str] = Field(default_factory=list)


class BatchResult(BaseModel):
    """Counters for a directory batch run."""

    success: int = 0
    failed: int = 0
    total: int = 0
    results: dict[str, ProcessResult] = Field(default_factory=dict)  # keyed by file name


class ToolCapabilities(BaseModel):
    """Codecs and container formats reported by ffmpeg."""

    codecs: list[str] = Field(default_factory=list)
    formats: list[str] = Field(default_factory=list)


class ToolStatus(BaseModel):
    """Availability of the external binaries."""

    ffmpeg: bool
    exiftool: bool
    exiftool_version: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str


# === API request bodies ===


class FileRequest(BaseModel):
    """Request naming a single file."""

    path: str


class AddRequest(BaseModel):
    """Stamp metadata onto one file."""

    input_path: str
    output_path: str | None = None
    config: RayBanConfig = Field(default_factory=RayBanConfig)
    process: bool = False
    options: ProcessingOptions | None = None


class BatchRequest(BaseModel):
    """Stamp metadata onto every video in a directory."""

    directory: str
    output_dir: str | None = None
    config: RayBanConfig = Field(default_factory=RayBanConfig)
    process: bool = False
    options: ProcessingOptions | None = None


class MergeRequest(BaseModel):
    """Concatenate videos and stamp the result."""

    input_paths: list[str]
    output_path: str
    config: RayBanConfig = Field(default_factory=RayBanConfig)


class SettingsUpdate(BaseModel):
    """Request body for updating settings. Only provided fields are changed."""

    log_level: str | None = None
    log_file: str | None = None
    ffmpeg_path: str | None = None
    ffprobe_path: str | None = None
    exiftool_path: str | None = None
    ffprobe_timeout: int | None = None
    default_quality: QualityTier | None = None
    temp_dir: str | None = None  # empty string clears it


class VerifyResponse(BaseModel):
    """Result of a tag verification."""

    path: str
    verified: bool
