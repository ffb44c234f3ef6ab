"""
Content Routes for Legendary Signatures API

Testimonials, site settings sections and contact form messages.
"""

from fastapi import APIRouter, HTTPException, Depends, Path, Query, status
from auth import verify_admin_access
from database import DatabaseService, newest_first
from error_handling import NotFoundError, StoreError, internal_error
from models import TestimonialCreate, TestimonialUpdate, SiteSettingsUpdate, ContactMessage
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["content"])

SETTINGS_SECTION_PATTERN = r'^[a-zA-Z0-9_-]{1,50}$'


# Testimonials

@router.get("/testimonials")
async def list_testimonials(featured: Optional[bool] = None):
    """Approved testimonials, newest first"""
    try:
        filters = [('approved', '==', True)]
        if featured is not None:
            filters.append(('featured', '==', featured))
        testimonials = newest_first(DatabaseService.query_documents('testimonials', filters=filters), 'date')
        return {"testimonials": testimonials, "count": len(testimonials)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list testimonials", e)


@router.get("/admin/testimonials")
async def list_all_testimonials(admin_data: dict = Depends(verify_admin_access)):
    try:
        testimonials = newest_first(DatabaseService.query_documents('testimonials'), 'date')
        return {"testimonials": testimonials, "count": len(testimonials)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list testimonials", e)


@router.post("/admin/testimonials", status_code=status.HTTP_201_CREATED)
async def create_testimonial(testimonial: TestimonialCreate, admin_data: dict = Depends(verify_admin_access)):
    try:
        testimonial_data = testimonial.model_dump()
        now = datetime.now(timezone.utc)
        testimonial_data['date'] = now
        testimonial_data['createdAt'] = now
        testimonial_id = DatabaseService.add_document('testimonials', testimonial_data)
        return {"success": True, "message": "Testimonial created successfully", "testimonial_id": testimonial_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create testimonial", e)


@router.put("/admin/testimonials/{testimonial_id}")
async def update_testimonial(testimonial_id: str, updates: TestimonialUpdate,
                             admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        DatabaseService.update_document('testimonials', testimonial_id, update_data, 'testimonial')
        return {"success": True, "message": "Testimonial updated successfully", "testimonial_id": testimonial_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update testimonial", e)


@router.patch("/admin/testimonials/{testimonial_id}/approve")
async def approve_testimonial(testimonial_id: str, approved: bool = True,
                              admin_data: dict = Depends(verify_admin_access)):
    try:
        DatabaseService.update_document('testimonials', testimonial_id, {'approved': approved}, 'testimonial')
        return {"success": True, "testimonial_id": testimonial_id, "approved": approved}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to approve testimonial", e)


@router.delete("/admin/testimonials/{testimonial_id}")
async def delete_testimonial(testimonial_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        if not DatabaseService.get_document('testimonials', testimonial_id):
            raise NotFoundError('testimonial', testimonial_id)
        DatabaseService.delete_document('testimonials', testimonial_id)
        return {"success": True, "message": "Testimonial deleted successfully", "testimonial_id": testimonial_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete testimonial", e)


# Site settings

@router.get("/settings/{section}")
async def get_settings(section: str):
    """One settings section; an unknown section is empty"""
    try:
        settings = DatabaseService.get_document('settings', section)
        return {"section": section, "data": (settings or {}).get('data', {}),
                "updatedAt": (settings or {}).get('updatedAt')}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get settings", e)


@router.put("/admin/settings/{section}")
async def update_settings(
    update: SiteSettingsUpdate,
    section: str = Path(..., pattern=SETTINGS_SECTION_PATTERN),
    admin_data: dict = Depends(verify_admin_access)
):
    """Replace one settings section"""
    try:
        DatabaseService.create_document('settings', section, {
            'data': update.data,
            'updatedAt': datetime.now(timezone.utc),
            'updatedBy': admin_data.get('uid'),
        })
        logger.info(f"Admin {admin_data.get('email')} updated settings section {section}")
        return {"success": True, "message": "Settings saved", "section": section}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to save settings", e)


# Contact messages

@router.post("/contact", status_code=status.HTTP_201_CREATED)
async def submit_contact_message(message: ContactMessage):
    try:
        message_data = message.model_dump()
        message_data['createdAt'] = datetime.now(timezone.utc)
        message_data['handled'] = False
        message_id = DatabaseService.add_document('contactMessages', message_data)
        logger.info(f"Contact message {message_id} received from {message.email}")
        return {"success": True, "message": "Thank you for your message. We will get back to you soon.",
                "message_id": message_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to send message", e)


@router.get("/admin/contact")
async def list_contact_messages(handled: Optional[bool] = Query(None), admin_data: dict = Depends(verify_admin_access)):
    try:
        filters = [('handled', '==', handled)] if handled is not None else []
        messages = newest_first(DatabaseService.query_documents('contactMessages', filters=filters))
        return {"messages": messages, "count": len(messages)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list contact messages", e)


@router.patch("/admin/contact/{message_id}/handled")
async def mark_contact_handled(message_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        DatabaseService.update_document('contactMessages', message_id, {
            'handled': True,
            'handledBy': admin_data.get('uid'),
            'handledAt': datetime.now(timezone.utc),
        }, 'message')
        return {"success": True, "message_id": message_id, "handled": True}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update contact message", e)
