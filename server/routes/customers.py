"""
Customer Routes for Legendary Signatures API

Admin management of customer accounts. Customers are users documents
with role "customer".
"""

from fastapi import APIRouter, HTTPException, Depends, Query, status
from auth import verify_admin_access
from database import DatabaseService, OrderService, UserService
from error_handling import DuplicateError, NotFoundError, StoreError, internal_error, paginate
from models import CustomerCreate, CustomerUpdate
from services.analytics import customer_order_stats
import logging
import uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/customers", tags=["customers"])


def _require_customer(customer_id: str) -> dict:
    customer = UserService.get_user_by_uid(customer_id)
    if not customer or customer.get('role', 'customer') != 'customer':
        raise NotFoundError('customer', customer_id)
    return customer


@router.get("")
async def list_customers(
    search: str = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    admin_data: dict = Depends(verify_admin_access)
):
    """Customers with their order count and total spent"""
    try:
        customers = UserService.get_users_by_roles(['customer'])
        if search:
            needle = search.lower()
            customers = [
                c for c in customers
                if needle in (c.get('displayName') or '').lower() or needle in (c.get('email') or '').lower()
            ]

        response = paginate(customers, page, per_page)
        for customer in response['data']:
            customer.update(customer_order_stats(OrderService.list_user_orders(customer['id'], limit=None)))
        return response

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list customers", e)


@router.get("/{customer_id}")
async def get_customer(customer_id: str, admin_data: dict = Depends(verify_admin_access)):
    """A customer with their orders"""
    try:
        customer = _require_customer(customer_id)
        orders = OrderService.list_user_orders(customer_id, limit=None)
        return {**customer, **customer_order_stats(orders), "orders": orders}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get customer", e)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_customer(customer: CustomerCreate, admin_data: dict = Depends(verify_admin_access)):
    """Create a customer record; uid links it to a Firebase Auth account when given"""
    try:
        customer_data = customer.model_dump()
        if UserService.find_by_email(customer_data['email']):
            raise DuplicateError(f"A user with email {customer_data['email']} already exists", 'email')

        customer_id = customer_data.pop('uid') or f"customer-{uuid.uuid4().hex[:12]}"
        if UserService.get_user_by_uid(customer_id):
            raise DuplicateError(f"User {customer_id} already exists", 'uid', customer_id)

        customer_data['role'] = 'customer'
        customer_data['createdBy'] = admin_data.get('uid')
        UserService.create_user(customer_id, customer_data)
        logger.info(f"Admin {admin_data.get('email')} created customer {customer_id}")

        return {"success": True, "message": "Customer created successfully", "customer_id": customer_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create customer", e)


@router.put("/{customer_id}")
async def update_customer(customer_id: str, updates: CustomerUpdate,
                          admin_data: dict = Depends(verify_admin_access)):
    try:
        update_data = updates.model_dump(exclude_unset=True)
        if not update_data:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")

        _require_customer(customer_id)
        if update_data.get('email'):
            existing = UserService.find_by_email(update_data['email'])
            if existing and existing['id'] != customer_id:
                raise DuplicateError(f"A user with email {update_data['email']} already exists", 'email')

        UserService.update_user(customer_id, update_data)
        return {"success": True, "message": "Customer updated successfully", "customer_id": customer_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update customer", e)


@router.delete("/{customer_id}")
async def delete_customer(customer_id: str, admin_data: dict = Depends(verify_admin_access)):
    """Delete a customer record; their orders are kept"""
    try:
        _require_customer(customer_id)
        DatabaseService.delete_document('users', customer_id)
        DatabaseService.delete_document('carts', customer_id)
        logger.info(f"Admin {admin_data.get('email')} deleted customer {customer_id}")
        return {"success": True, "message": "Customer deleted successfully", "customer_id": customer_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to delete customer", e)
