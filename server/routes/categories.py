"""
Category Routes for Legendary Signatures API
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_admin_access
from database import DatabaseService
from error_handling import DuplicateError, NotFoundError, StoreError, internal_error
from models import CategoryCreate, CategoryUpdate
from utils import generate_slug
from datetime import datetime, timezone
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["categories"])


def _find_by_slug(slug: str) -> Optional[dict]:
    matches = DatabaseService.query_documents('categories', filters=[('slug', '==', slug)], limit=1)
    return matches[0] if matches else None


def _ensure_slug_unused(slug: str, category_id: str = None):
    existing = _find_by_slug(slug)
    if existing and existing['id'] != category_id:
        raise DuplicateError(f"Category slug '{slug}' already exists", 'slug', slug)


@router.get("/categories")
async def list_categories(featured: Optional[bool] = None):
    """Categories in display order"""
    try:
        categories = DatabaseService.query_documents('categories')
        if featured is not None:
            categories = [c for c in categories if c.get('featured', False) == featured]
        categories.sort(key=lambda c: (c.get('order', 0), c.get('name', '')))
        return {"categories": categories, "count": len(categories)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list categories", e)


@router.get("/categories/{id_or_slug}")
async def get_category(id_or_slug: str):
    """Get a category by document id or slug"""
    try:
        category = DatabaseService.get_document('categories', id_or_slug) or _find_by_slug(id_or_slug)
        if not category:
            raise NotFoundError('category', id_or_slug)
        return category

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get category", e)


@router.post("/admin/categories", status_code=status.HTTP_201_CREATED)
async def create_category(category: CategoryCreate, admin_data: dict = Depends(verify_admin_access)):
    """Create a category; the slug is derived from the name when not given"""
    try:
        category_data = category.model_dump()
        category_data['slug'] = category_data.get('slug') or generate_slug(category_data['name'])
        if not category_data['slug']:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Category name must contain letters or digits")
        _ensure_slug_unused(category_data['slug'])

        now = datetime.now(timezone.utc)
        category_data['createdAt'] = now
        category_data['updatedAt'] = now
        category_id = DatabaseService.add_document('categories', category_data)
        logger.info(f"Admin {admin_data.get('email')} created category {category_data['slug']}")

        return {
            "success": True,
            "message": "Category created successfully",
            "category_id": category_id,
            "slug": category_data['slug'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create category", e)


@router.put("/admin/categories/{category_id}")
async def update_category(category_id: str, updates: CategoryUpdate,
                          admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
        if update_data.get('slug'):
            _ensure_slug_unused(update_data['slug'], category_id)

        update_data['updatedAt'] = datetime.now(timezone.utc)
        DatabaseService.update_document('categories', category_id, update_data, 'category')

        return {"success": True, "message": "Category updated successfully", "category_id": category_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update category", e)


@router.delete("/admin/categories/{category_id}")
async def delete_category(category_id: str, admin_data: dict = Depends(verify_admin_access)):
    try:
        if not DatabaseService.get_document('categories', category_id):
            raise NotFoundError('category', category_id)
        DatabaseService.delete_document('categories', category_id)
        logger.info(f"Admin {admin_data.get('email')} deleted category {category_id}")

        return {"success": True, "message": "Category deleted successfully", "category_id": category_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete category", e)
