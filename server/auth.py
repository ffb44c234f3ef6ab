"""
Authentication Module for Legendary Signatures API

This module handles Firebase ID token verification and role-based access
for customers, admins and superadmins.
"""

from fastapi import HTTPException, Depends, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from firebase_admin import auth
from firebase_init import db

import logging

logger = logging.getLogger(__name__)

ADMIN_ROLES = ('admin', 'superadmin')


def _user_from_token(id_token: str) -> dict:
    decoded_token = auth.verify_id_token(id_token)
    return {
        'uid': decoded_token.get('uid'),
        'email': decoded_token.get('email'),
        'name': decoded_token.get('name', 'Unknown'),
    }


async def verify_firebase_token(credentials: HTTPAuthorizationCredentials = Depends(HTTPBearer(auto_error=False))):
    """
    Verify Firebase token from Authorization header

    Args:
        credentials: HTTP authorization credentials

    Returns:
        dict: User data containing uid, email and name

    Raises:
        HTTPException: If the token is missing or verification fails
    """
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    try:
        user_data = _user_from_token(credentials.credentials)
        logger.debug(f"Token verified for user: {user_data['uid']}")
        return user_data
    except Exception as e:
        logger.error(f"Token verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token"
        )


def get_user_role(user_uid: str) -> str:
    """
    Look up a user's role

    Args:
        user_uid: Firebase Auth UID

    Returns:
        str: customer, admin or superadmin; customer when no user document exists
    """
    user_doc = db.collection('users').document(user_uid).get()
    if user_doc.exists:
        return user_doc.to_dict().get('role', 'customer')
    return 'customer'


async def verify_admin_access(user_data: dict = Depends(verify_firebase_token)):
    """
    Verify user has admin privileges

    Args:
        user_data: User data from token verification

    Returns:
        dict: User data with its role if admin access is granted

    Raises:
        HTTPException: If admin access is denied
    """
    try:
        role = get_user_role(user_data.get('uid'))
    except Exception as e:
        logger.error(f"Error verifying admin access: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Unable to verify admin access"
        )

    if role not in ADMIN_ROLES:
        logger.warning(f"Admin access denied for user: {user_data.get('uid')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )

    return {**user_data, 'role': role}


async def verify_superadmin(admin_data: dict = Depends(verify_admin_access)):
    """Only superadmins manage other admins"""
    if admin_data.get('role') != 'superadmin':
        logger.warning(f"Superadmin access denied for user: {admin_data.get('uid')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Superadmin access required"
        )
    return admin_data


async def verify_user_or_admin(user_data: dict = Depends(verify_firebase_token)):
    """
    Attach admin status to the authenticated user

    Args:
        user_data: User data from token verification

    Returns:
        dict: User data with is_admin set
    """
    is_admin = False
    try:
        is_admin = get_user_role(user_data.get('uid')) in ADMIN_ROLES
    except Exception as e:
        logger.error(f"Error checking admin status: {e}")

    return {**user_data, 'is_admin': is_admin}


def require_user_ownership_or_admin(resource_user_id: str, current_user: dict):
    """
    Verify user owns the resource or is an admin

    Args:
        resource_user_id: User ID associated with the resource
        current_user: Current authenticated user data

    Raises:
        HTTPException: If access is denied
    """
    if current_user.get('is_admin'):
        return True

    if current_user.get('uid') != resource_user_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied - insufficient permissions"
        )

    return True
