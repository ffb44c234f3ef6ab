"""
Personalized Video Routes for Legendary Signatures API

The public video catalog, the players who record personalized videos,
customer video requests and their fulfilment by admins.
"""

from fastapi import APIRouter, HTTPException, Depends, File, Form, Query, UploadFile, status
from auth import verify_firebase_token, verify_admin_access, verify_user_or_admin, require_user_ownership_or_admin
from database import DatabaseService, newest_first
from error_handling import NotFoundError, StoreError, internal_error
from media_storage import get_media_storage, store_upload
from models import (
    VideoCreate, VideoUpdate, VideoPlayerCreate, VideoPlayerUpdate,
    VideoRequestCreate, VideoRequestStatusUpdate, VideoPaymentUpdate, parse_json_form
)
from services import videos as video_service
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["videos"])


def _require(collection_name: str, doc_id: str, resource: str) -> dict:
    document = DatabaseService.get_document(collection_name, doc_id)
    if not document:
        raise NotFoundError(resource, doc_id)
    return document


# Video catalog

@router.get("/videos")
async def list_videos(featured: Optional[bool] = None):
    try:
        filters = [('featured', '==', featured)] if featured is not None else []
        videos = newest_first(DatabaseService.query_documents('videos', filters=filters))
        return {"videos": videos, "count": len(videos)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list videos", e)


@router.get("/videos/{video_id}")
async def get_video(video_id: str):
    try:
        return _require('videos', video_id, 'video')

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get video", e)


@router.post("/admin/videos", status_code=status.HTTP_201_CREATED)
async def create_video(
    video: str = Form(..., description="VideoCreate as JSON"),
    videoFile: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    admin_data: dict = Depends(verify_admin_access)
):
    """Add a catalog video, uploading the video and thumbnail files when given"""
    video_data = parse_json_form(VideoCreate, video).model_dump()
    try:
        if videoFile is not None:
            stored = await store_upload(videoFile, 'videos', kind='video')
            video_data['videoUrl'] = stored['url']
            video_data['videoPath'] = stored['path']
        if thumbnail is not None:
            stored = await store_upload(thumbnail, 'thumbnails')
            video_data['thumbnailUrl'] = stored['url']
            video_data['thumbnailPath'] = stored['path']

        now = datetime.now(timezone.utc)
        video_data['createdAt'] = now
        video_data['updatedAt'] = now
        video_id = DatabaseService.add_document('videos', video_data)
        logger.info(f"Admin {admin_data.get('email')} created video {video_id}")

        return {
            "success": True,
            "message": "Video created successfully",
            "video_id": video_id,
            "videoUrl": video_data['videoUrl'],
            "thumbnailUrl": video_data['thumbnailUrl'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create video", e)


@router.put("/admin/videos/{video_id}")
async def update_video(video_id: str, updates: VideoUpdate, admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        update_data['updatedAt'] = datetime.now(timezone.utc)
        DatabaseService.update_document('videos', video_id, update_data, 'video')
        return {"success": True, "message": "Video updated successfully", "video_id": video_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update video", e)


@router.delete("/admin/videos/{video_id}")
async def delete_video(video_id: str, admin_data: dict = Depends(verify_admin_access)):
    """Delete a catalog video and its stored files"""
    try:
        video = _require('videos', video_id, 'video')
        for path_field in ('videoPath', 'thumbnailPath'):
            if video.get(path_field):
                get_media_storage().delete(video[path_field])
        DatabaseService.delete_document('videos', video_id)
        logger.info(f"Admin {admin_data.get('email')} deleted video {video_id}")

        return {"success": True, "message": "Video deleted successfully", "video_id": video_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete video", e)


# Players

@router.get("/video-players")
async def list_video_players(featured: Optional[bool] = None):
    """Players currently taking requests"""
    try:
        players = DatabaseService.query_documents('videoPlayers', filters=[('available', '==', True)])
        if featured is not None:
            players = [p for p in players if p.get('featured', False) == featured]
        players.sort(key=lambda p: p.get('name', ''))
        return {"players": players, "count": len(players)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list video players", e)


@router.get("/video-players/{player_id}")
async def get_video_player(player_id: str):
    try:
        return video_service.get_player(player_id)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get video player", e)


@router.post("/admin/video-players", status_code=status.HTTP_201_CREATED)
async def create_video_player(player: VideoPlayerCreate, admin_data: dict = Depends(verify_admin_access)):
    try:
        player_data = player.model_dump()
        now = datetime.now(timezone.utc)
        player_data['createdAt'] = now
        player_data['updatedAt'] = now
        player_id = DatabaseService.add_document('videoPlayers', player_data)
        return {"success": True, "message": "Player created successfully", "player_id": player_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create video player", e)


@router.put("/admin/video-players/{player_id}")
async def update_video_player(player_id: str, updates: VideoPlayerUpdate,
                              admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        update_data['updatedAt'] = datetime.now(timezone.utc)
        DatabaseService.update_document('videoPlayers', player_id, update_data, 'player')
        return {"success": True, "message": "Player updated successfully", "player_id": player_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update video player", e)


# Video requests

@router.post("/video-requests", status_code=status.HTTP_201_CREATED)
async def create_video_request(request: VideoRequestCreate, user_data: dict = Depends(verify_firebase_token)):
    """Request a personalized video; creates a video order"""
    try:
        result = video_service.create_video_request(user_data, request.model_dump())
        return {"success": True, "message": "Video request submitted successfully", **result}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create video request", e)


@router.get("/video-requests")
async def list_my_video_requests(user_data: dict = Depends(verify_firebase_token)):
    try:
        requests = video_service.list_user_video_requests(user_data['uid'])
        return {"videoRequests": requests, "count": len(requests)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list video requests", e)


@router.get("/video-requests/{request_id}")
async def get_video_request(request_id: str, user_data: dict = Depends(verify_user_or_admin)):
    try:
        video_request = video_service.get_video_request(request_id)
        require_user_ownership_or_admin(video_request.get('userId'), user_data)
        return video_request

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get video request", e)


@router.get("/admin/video-requests")
async def list_video_requests(status: str = Query('all'), admin_data: dict = Depends(verify_admin_access)):
    try:
        requests = video_service.list_video_requests(status)
        return {"videoRequests": requests, "count": len(requests), "status": status}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list video requests", e)


@router.patch("/admin/video-requests/{request_id}/status")
async def update_video_request_status(request_id: str, update: VideoRequestStatusUpdate,
                                      admin_data: dict = Depends(verify_admin_access)):
    try:
        video_request = video_service.update_video_request_status(
            request_id, update.status, update.videoUrl, update.thumbnailUrl, update.comment
        )
        logger.info(f"Admin {admin_data.get('email')} set video request {request_id} to {update.status}")
        return {
            "success": True,
            "message": f"Video request {update.status}",
            "request_id": request_id,
            "status": video_request['status'],
            "videoUrl": video_request.get('videoUrl'),
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update video request", e)


@router.post("/admin/video-requests/{request_id}/fulfil")
async def fulfil_video_request(
    request_id: str,
    videoFile: UploadFile = File(...),
    thumbnail: Optional[UploadFile] = File(None),
    comment: Optional[str] = Form(None),
    admin_data: dict = Depends(verify_admin_access)
):
    """Upload the recorded video and complete the request"""
    try:
        video_service.check_transition(video_service.get_video_request(request_id), 'completed')

        stored_paths = []
        try:
            stored_video = await store_upload(videoFile, f"video-requests/{request_id}", kind='video')
            stored_paths.append(stored_video['path'])
            thumbnail_url = None
            if thumbnail is not None:
                stored_thumbnail = await store_upload(thumbnail, f"video-requests/{request_id}")
                stored_paths.append(stored_thumbnail['path'])
                thumbnail_url = stored_thumbnail['url']

            video_request = video_service.update_video_request_status(
                request_id, 'completed', stored_video['url'], thumbnail_url, comment or "Video delivered"
            )
        except Exception:
            # drop uploads the request never took
            for path in stored_paths:
                get_media_storage().delete(path)
            raise

        logger.info(f"Admin {admin_data.get('email')} fulfilled video request {request_id}")
        return {
            "success": True,
            "message": "Video request completed",
            "request_id": request_id,
            "videoUrl": video_request['videoUrl'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to fulfil video request", e)


@router.patch("/admin/video-requests/{request_id}/payment")
async def update_video_payment(request_id: str, update: VideoPaymentUpdate,
                               admin_data: dict = Depends(verify_admin_access)):
    try:
        video_service.update_video_payment(request_id, update.paymentStatus)
        return {
            "success": True,
            "message": f"Payment marked as {update.paymentStatus}",
            "request_id": request_id,
            "paymentStatus": update.paymentStatus,
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update video payment", e)
