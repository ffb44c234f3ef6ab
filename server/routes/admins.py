"""
Admin Account Routes for Legendary Signatures API

Any admin can list the admin team; only superadmins add, re-role or remove
admins.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_admin_access, verify_superadmin, ADMIN_ROLES
from database import DatabaseService, UserService
from error_handling import NotFoundError, StoreError, ValidationError, internal_error
from models import AdminCreate, RoleUpdate
import logging
import uuid

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/admins", tags=["admins"])


@router.get("")
async def list_admins(admin_data: dict = Depends(verify_admin_access)):
    try:
        admins = UserService.get_users_by_roles(list(ADMIN_ROLES))
        return {"admins": admins, "count": len(admins)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list admins", e)


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_admin(admin: AdminCreate, superadmin_data: dict = Depends(verify_superadmin)):
    """
    Grant admin access

    An existing user with the same email is promoted; otherwise a users
    document is created, keyed by uid when given.
    """
    try:
        admin_data = admin.model_dump()
        existing = UserService.find_by_email(admin_data['email'])
        if existing:
            UserService.update_user(existing['id'], {'role': admin_data['role']})
            admin_id = existing['id']
        else:
            admin_id = admin_data.pop('uid') or f"admin-{uuid.uuid4().hex[:12]}"
            admin_data['createdBy'] = superadmin_data.get('uid')
            UserService.create_user(admin_id, admin_data)

        logger.info(f"Superadmin {superadmin_data.get('email')} granted {admin_data['role']} to {admin_id}")
        return {
            "success": True,
            "message": "Admin created successfully",
            "admin_id": admin_id,
            "role": admin_data['role'],
        }

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create admin", e)


@router.patch("/{user_id}/role")
async def change_role(user_id: str, update: RoleUpdate, superadmin_data: dict = Depends(verify_superadmin)):
    """Change a user's role; superadmins cannot demote themselves"""
    try:
        if user_id == superadmin_data.get('uid') and update.role != 'superadmin':
            raise ValidationError("You cannot change your own superadmin role", 'role', update.role)

        if not UserService.get_user_by_uid(user_id):
            raise NotFoundError('user', user_id)
        UserService.update_user(user_id, {'role': update.role})
        logger.info(f"Superadmin {superadmin_data.get('email')} set role of {user_id} to {update.role}")

        return {"success": True, "message": f"Role updated to {update.role}", "user_id": user_id, "role": update.role}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to update role", e)


@router.delete("/{user_id}")
async def remove_admin(user_id: str, superadmin_data: dict = Depends(verify_superadmin)):
    """Delete an admin account"""
    try:
        if user_id == superadmin_data.get('uid'):
            raise ValidationError("You cannot delete your own account", 'user_id', user_id)

        user = UserService.get_user_by_uid(user_id)
        if not user or user.get('role') not in ADMIN_ROLES:
            raise NotFoundError('admin', user_id)
        DatabaseService.delete_document('users', user_id)
        logger.info(f"Superadmin {superadmin_data.get('email')} removed admin {user_id}")

        return {"success": True, "message": "Admin removed successfully", "user_id": user_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to remove admin", e)
