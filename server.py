"""
FastAPI Server for Floor Plan Geometry Extraction

Provides REST endpoints for detecting rooms, building envelopes and
spanning walls on raster floor plan images.
"""

import json
import logging
from typing import Optional, Any
from fastapi import FastAPI, HTTPException, UploadFile, File
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
import cv2
import numpy as np

from floorplan_geometry import __version__
from floorplan_geometry.config.detection_config import DetectionConfig
from floorplan_geometry.detection.envelope_detector import EnvelopeDetector
from floorplan_geometry.detection.room_detector import RoomDetector
from floorplan_geometry.raster.models import RasterBuffer
from floorplan_geometry.raster.preprocessing import preprocess_for_room_detection
from floorplan_geometry.visualization import (
    draw_detection_overlay,
    draw_envelope_overlay,
    image_from_base64,
    numpy_to_base64,
)


class NumpyEncoder(json.JSONEncoder):
    """Custom JSON encoder that handles numpy types"""
    def default(self, obj: Any) -> Any:
        if isinstance(obj, np.integer):
            return int(obj)
        if isinstance(obj, np.floating):
            return float(obj)
        if isinstance(obj, np.ndarray):
            return obj.tolist()
        if isinstance(obj, np.bool_):
            return bool(obj)
        return super().default(obj)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Floor Plan Geometry API",
    description="Room, envelope and spanning-wall extraction from raster floor plans",
    version=__version__,
)

# Add CORS middleware for frontend access
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173", "http://localhost:3000", "*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

DEFAULT_CONFIG = DetectionConfig.default()


class RoomRequest(BaseModel):
    """Request body for room detection on a base64-encoded image"""
    image: str  # Base64-encoded image (with or without data URL prefix)
    x: int
    y: int
    pixels_per_unit: float = 1.0
    max_area: Optional[float] = None
    preprocess: bool = False
    include_overlay: bool = False


class EnvelopeRequest(BaseModel):
    """Request body for envelope detection on a base64-encoded image"""
    image: str
    pixels_per_unit: float = 1.0
    include_spanning_walls: bool = False
    include_overlay: bool = False


class HealthResponse(BaseModel):
    """Health check response"""
    status: str
    version: str


def _json_response(output: dict) -> JSONResponse:
    # Use custom encoder to handle numpy types
    json_str = json.dumps(output, cls=NumpyEncoder)
    return JSONResponse(content=json.loads(json_str))


def _decode(image: str) -> RasterBuffer:
    buffer = image_from_base64(image)
    if buffer is None:
        raise HTTPException(status_code=400, detail="Failed to decode image")
    logger.info(f"Image decoded: {buffer.width}x{buffer.height}")
    return buffer


def _check_scale(pixels_per_unit: float) -> None:
    if pixels_per_unit <= 0:
        raise HTTPException(status_code=400, detail="pixels_per_unit must be > 0")


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(status="healthy", version=__version__)


def _detect_room(buffer: RasterBuffer, request: RoomRequest) -> dict:
    work = buffer
    if request.preprocess:
        work = buffer.copy()
        preprocess_for_room_detection(work, request.pixels_per_unit, DEFAULT_CONFIG.rules)

    result = RoomDetector(DEFAULT_CONFIG).detect(
        work, request.x, request.y, request.pixels_per_unit, request.max_area
    )
    if result is None:
        logger.info(f"No room found at ({request.x}, {request.y})")
        return {"found": False}

    output = result.to_dict()
    if request.include_overlay:
        vis = draw_detection_overlay(buffer, result, seed=(request.x, request.y))
        output["overlay"] = numpy_to_base64(vis)
    return output


@app.post("/detect/room")
async def detect_room(request: RoomRequest):
    """
    Detect the room containing a seed pixel.

    Returns the room polygon (pixel space), door gaps and wall
    thickness, or {"found": false} when no room could be isolated.
    """
    try:
        logger.info(f"Received room request at ({request.x}, {request.y})")
        _check_scale(request.pixels_per_unit)
        buffer = _decode(request.image)
        return _json_response(_detect_room(buffer, request))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Room detection error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/detect/room/upload")
async def detect_room_upload(
    x: int,
    y: int,
    file: UploadFile = File(...),
    pixels_per_unit: float = 1.0,
    max_area: Optional[float] = None,
):
    """
    Detect a room on an uploaded floor plan image file.

    Accepts JPEG, PNG image files.
    """
    try:
        logger.info(f"Received file upload: {file.filename}")
        _check_scale(pixels_per_unit)

        # Read file contents
        contents = await file.read()
        nparr = np.frombuffer(contents, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_COLOR) if nparr.size else None

        if image is None:
            raise HTTPException(status_code=400, detail="Failed to decode uploaded image")

        buffer = RasterBuffer.from_bgr(image)
        request = RoomRequest(image="", x=x, y=y, pixels_per_unit=pixels_per_unit, max_area=max_area)
        return _json_response(_detect_room(buffer, request))

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Room detection error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/detect/envelope")
async def detect_envelope(request: EnvelopeRequest):
    """
    Detect the building envelope and, optionally, its spanning walls.
    """
    try:
        logger.info("Received envelope request")
        _check_scale(request.pixels_per_unit)
        buffer = _decode(request.image)

        result = EnvelopeDetector(DEFAULT_CONFIG).detect(
            buffer,
            request.pixels_per_unit,
            detect_spanning=request.include_spanning_walls,
        )
        if result is None:
            logger.info("No envelope found")
            return _json_response({"found": False})

        output = result.to_dict()
        if request.include_overlay:
            output["overlay"] = numpy_to_base64(draw_envelope_overlay(buffer, result))

        logger.info(
            f"Envelope complete: {len(result.polygon)} vertices, "
            f"{len(result.spanning_walls)} spanning walls"
        )
        return _json_response(output)

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Envelope detection error: {str(e)}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/detect/config")
async def get_default_config():
    """Get the default detection configuration"""
    return DEFAULT_CONFIG.to_dict()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
