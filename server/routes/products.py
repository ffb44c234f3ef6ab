"""
Product Routes for Legendary Signatures API

Public catalog browsing and admin product management, including product
image uploads.
"""

from fastapi import APIRouter, HTTPException, Depends, File, Form, Query, UploadFile, status
from auth import verify_admin_access
from config import PRODUCT_LIST_LIMIT
from database import DatabaseService, ProductService, newest_first
from error_handling import NotFoundError, StorageUploadError, StoreError, internal_error
from media_storage import get_media_storage, store_upload
from models import ProductCreate, ProductUpdate, parse_json_form
from utils import placeholder_image_url
from typing import Optional
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["products"])


def _matches_search(product: dict, search: str) -> bool:
    needle = search.lower()
    haystack = [
        product.get('title'),
        product.get('description'),
        product.get('signedBy'),
        product.get('team'),
        *(product.get('tags') or []),
    ]
    return any(needle in str(value).lower() for value in haystack if value)


def filter_products(products: list, signed_by: Optional[str] = None, search: Optional[str] = None,
                    min_price: Optional[float] = None, max_price: Optional[float] = None) -> list:
    """Filters Firestore cannot express without composite indexes"""
    if signed_by:
        products = [p for p in products if signed_by.lower() in (p.get('signedBy') or '').lower()]
    if search:
        products = [p for p in products if _matches_search(p, search)]
    if min_price is not None:
        products = [p for p in products if p.get('price', 0) >= min_price]
    if max_price is not None:
        products = [p for p in products if p.get('price', 0) <= max_price]
    return products


async def _image_fields(image: Optional[UploadFile], title: str, signed_by: str) -> dict:
    """Upload a product image, falling back to a placeholder when the upload fails"""
    if image is None:
        return {}
    try:
        stored = await store_upload(image, 'products')
        return {'imageUrl': stored['url'], 'imagePath': stored['path'], 'usesPlaceholder': False}
    except StorageUploadError as e:
        logger.warning(f"Image upload failed for product '{title}', using placeholder: {e.message}")
        return {
            'imageUrl': placeholder_image_url(title, signed_by),
            'imagePath': None,
            'usesPlaceholder': True,
        }


@router.get("/products")
async def list_products(
    category: Optional[str] = None,
    type: Optional[str] = None,
    featured: Optional[bool] = None,
    available: Optional[bool] = None,
    signedBy: Optional[str] = None,
    search: Optional[str] = None,
    minPrice: Optional[float] = Query(None, ge=0),
    maxPrice: Optional[float] = Query(None, ge=0),
    limit: int = Query(PRODUCT_LIST_LIMIT, ge=1, le=200)
):
    """List products, newest first"""
    try:
        filters = []
        if category:
            filters.append(('categoryId', '==', category))
        if type:
            filters.append(('type', '==', type))
        if featured is not None:
            filters.append(('featured', '==', featured))
        if available is not None:
            filters.append(('available', '==', available))

        products = newest_first(DatabaseService.query_documents('products', filters=filters))
        products = filter_products(products, signedBy, search, minPrice, maxPrice)[:limit]

        return {"products": products, "count": len(products)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list products", e)


@router.get("/products/featured")
async def list_featured_products(limit: int = Query(8, ge=1, le=50)):
    """Featured products that can be bought"""
    try:
        products = DatabaseService.query_documents('products', filters=[
            ('featured', '==', True),
            ('available', '==', True),
        ])
        products = newest_first(products)[:limit]
        return {"products": products, "count": len(products)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list featured products", e)


@router.get("/products/{product_id}")
async def get_product(product_id: str):
    """Get one product and count the view"""
    try:
        product = ProductService.get_product(product_id)
        if not product:
            raise NotFoundError('product', product_id)

        ProductService.increment_view_count(product_id, product.get('viewCount', 0))
        product['viewCount'] = product.get('viewCount', 0) + 1
        return product

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get product", e)


@router.post("/admin/products", status_code=status.HTTP_201_CREATED)
async def create_product(
    product: str = Form(..., description="ProductCreate as JSON"),
    image: Optional[UploadFile] = File(None),
    admin_data: dict = Depends(verify_admin_access)
):
    """Create a product with an optional image upload"""
    product_data = parse_json_form(ProductCreate, product).model_dump()
    try:
        product_data.update(await _image_fields(image, product_data['title'], product_data['signedBy']))
        if not product_data.get('imageUrl'):
            product_data['imageUrl'] = placeholder_image_url(product_data['title'], product_data['signedBy'])
            product_data['usesPlaceholder'] = True
        product_data.setdefault('usesPlaceholder', False)
        product_data['createdBy'] = admin_data.get('uid')

        product_id = ProductService.create_product(product_data)
        logger.info(f"Admin {admin_data.get('email')} created product {product_id}")

        return {
            "success": True,
            "message": "Product created successfully",
            "product_id": product_id,
            "imageUrl": product_data['imageUrl'],
            "usesPlaceholder": product_data['usesPlaceholder'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create product", e)


@router.put("/admin/products/{product_id}")
async def update_product(
    product_id: str,
    updates: ProductUpdate,
    admin_data: dict = Depends(verify_admin_access)
):
    """Update product fields"""
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        current = ProductService.get_product(product_id)
        if not current:
            raise NotFoundError('product', product_id)
        if 'imageUrl' in update_data and current.get('imagePath'):
            get_media_storage().delete(current['imagePath'])
            update_data['imagePath'] = None
            update_data['usesPlaceholder'] = False

        ProductService.update_product(product_id, update_data)
        logger.info(f"Admin {admin_data.get('email')} updated product {product_id}")

        return {"success": True, "message": "Product updated successfully", "product_id": product_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update product", e)


@router.put("/admin/products/{product_id}/image")
async def replace_product_image(
    product_id: str,
    image: UploadFile = File(...),
    admin_data: dict = Depends(verify_admin_access)
):
    """Upload a new product image and delete the stored one it replaces"""
    try:
        current = ProductService.get_product(product_id)
        if not current:
            raise NotFoundError('product', product_id)

        stored = await store_upload(image, 'products')
        if current.get('imagePath'):
            get_media_storage().delete(current['imagePath'])

        ProductService.update_product(product_id, {
            'imageUrl': stored['url'],
            'imagePath': stored['path'],
            'usesPlaceholder': False,
        })
        return {"success": True, "message": "Product image updated", "imageUrl": stored['url']}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update product image", e)


@router.patch("/admin/products/{product_id}/availability")
async def toggle_product_availability(product_id: str, admin_data: dict = Depends(verify_admin_access)):
    """Flip a product between available and unavailable"""
    try:
        product = ProductService.get_product(product_id)
        if not product:
            raise NotFoundError('product', product_id)

        available = not product.get('available', True)
        ProductService.update_product(product_id, {'available': available})
        logger.info(f"Admin {admin_data.get('email')} set product {product_id} available={available}")

        return {"success": True, "product_id": product_id, "available": available}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to toggle product availability", e)


@router.delete("/admin/products/{product_id}")
async def delete_product(product_id: str, admin_data: dict = Depends(verify_admin_access)):
    """Delete a product and its stored image"""
    try:
        product = ProductService.get_product(product_id)
        if not product:
            raise NotFoundError('product', product_id)

        if product.get('imagePath'):
            get_media_storage().delete(product['imagePath'])
        DatabaseService.delete_document('products', product_id)
        logger.info(f"Admin {admin_data.get('email')} deleted product {product_id}")

        return {"success": True, "message": "Product deleted successfully", "product_id": product_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete product", e)
