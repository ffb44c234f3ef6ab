"""
Banner Routes for Legendary Signatures API

Banners fill page slots (positions) between a start and an end date.
"""

from fastapi import APIRouter, HTTPException, Depends, File, Form, UploadFile, status
from auth import verify_admin_access
from database import DatabaseService, newest_first
from error_handling import NotFoundError, StoreError, ValidationError, internal_error
from media_storage import get_media_storage, store_upload
from models import BannerCreate, BannerUpdate, parse_json_form
from utils import to_datetime
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["banners"])


def is_live(banner: dict, now: datetime) -> bool:
    """Active and inside its [startDate, endDate] window"""
    if not banner.get('active', False):
        return False
    start_date = to_datetime(banner.get('startDate'))
    end_date = to_datetime(banner.get('endDate'))
    return bool(start_date and end_date and start_date <= now <= end_date)


def _require_banner(banner_id: str) -> dict:
    banner = DatabaseService.get_document('banners', banner_id)
    if not banner:
        raise NotFoundError('banner', banner_id)
    return banner


@router.get("/banners")
async def list_live_banners(position: Optional[str] = None):
    """Banners showing right now, optionally for one position"""
    try:
        filters = [('active', '==', True)]
        if position:
            filters.append(('position', '==', position))
        now = datetime.now(timezone.utc)
        banners = [b for b in DatabaseService.query_documents('banners', filters=filters) if is_live(b, now)]
        return {"banners": newest_first(banners, 'startDate'), "count": len(banners)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list banners", e)


@router.get("/admin/banners")
async def list_banners(admin_data: dict = Depends(verify_admin_access)):
    try:
        banners = newest_first(DatabaseService.query_documents('banners'))
        return {"banners": banners, "count": len(banners)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list banners", e)


@router.get("/admin/banners/{banner_id}")
async def get_banner(banner_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        return _require_banner(banner_id)

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get banner", e)


@router.post("/admin/banners", status_code=status.HTTP_201_CREATED)
async def create_banner(
    banner: str = Form(..., description="BannerCreate as JSON"),
    image: Optional[UploadFile] = File(None),
    mobileImage: Optional[UploadFile] = File(None),
    admin_data: dict = Depends(verify_admin_access)
):
    """Create a banner from an image URL or an uploaded image"""
    banner_data = parse_json_form(BannerCreate, banner).model_dump()
    try:
        if image is not None:
            stored = await store_upload(image, 'banners')
            banner_data['imageUrl'] = stored['url']
            banner_data['imagePath'] = stored['path']
        if mobileImage is not None:
            stored = await store_upload(mobileImage, 'banners')
            banner_data['mobileImageUrl'] = stored['url']
            banner_data['mobileImagePath'] = stored['path']
        if not banner_data.get('imageUrl'):
            raise ValidationError("A banner needs an imageUrl or an uploaded image", 'imageUrl')

        now = datetime.now(timezone.utc)
        banner_data['createdAt'] = now
        banner_data['updatedAt'] = now
        banner_id = DatabaseService.add_document('banners', banner_data)
        logger.info(f"Admin {admin_data.get('email')} created banner {banner_id}")

        return {
            "success": True,
            "message": "Banner created successfully",
            "banner_id": banner_id,
            "imageUrl": banner_data['imageUrl'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create banner", e)


@router.put("/admin/banners/{banner_id}")
async def update_banner(banner_id: str, updates: BannerUpdate, admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        current = _require_banner(banner_id)
        start_date = to_datetime(update_data.get('startDate', current.get('startDate')))
        end_date = to_datetime(update_data.get('endDate', current.get('endDate')))
        if start_date and end_date and end_date <= start_date:
            raise ValidationError("endDate must be after startDate", 'endDate')

        if 'imageUrl' in update_data and current.get('imagePath'):
            get_media_storage().delete(current['imagePath'])
            update_data['imagePath'] = None

        update_data['updatedAt'] = datetime.now(timezone.utc)
        DatabaseService.update_document('banners', banner_id, update_data, 'banner')
        return {"success": True, "message": "Banner updated successfully", "banner_id": banner_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update banner", e)


@router.patch("/admin/banners/{banner_id}/active")
async def toggle_banner(banner_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        banner = _require_banner(banner_id)
        active = not banner.get('active', False)
        DatabaseService.update_document('banners', banner_id, {
            'active': active,
            'updatedAt': datetime.now(timezone.utc)
        }, 'banner')
        return {"success": True, "banner_id": banner_id, "active": active}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to toggle banner", e)


@router.delete("/admin/banners/{banner_id}")
async def delete_banner(banner_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        banner = _require_banner(banner_id)
        for path_field in ('imagePath', 'mobileImagePath'):
            if banner.get(path_field):
                get_media_storage().delete(banner[path_field])
        DatabaseService.delete_document('banners', banner_id)
        logger.info(f"Admin {admin_data.get('email')} deleted banner {banner_id}")
        return {"success": True, "message": "Banner deleted successfully", "banner_id": banner_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete banner", e)
