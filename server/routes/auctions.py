"""
Auction Routes for Legendary Signatures API
"""

from fastapi import APIRouter, HTTPException, Depends, status
from auth import verify_firebase_token, verify_admin_access
from database import DatabaseService, UserService
from error_handling import NotFoundError, StoreError, ValidationError, internal_error
from models import AuctionCreate, BidRequest
from utils import round_money, to_datetime
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["auctions"])


def is_open(auction: dict, now: datetime) -> bool:
    end_time = to_datetime(auction.get('endTime'))
    return auction.get('status') != 'closed' and end_time is not None and end_time > now


def _require_auction(auction_id: str) -> dict:
    auction = DatabaseService.get_document('auctions', auction_id)
    if not auction:
        raise NotFoundError('auction', auction_id)
    return auction


@router.get("/auctions")
async def list_auctions(active: bool = False):
    """All auctions, soonest ending first; active=true keeps only open ones"""
    try:
        now = datetime.now(timezone.utc)
        auctions = DatabaseService.query_documents('auctions')
        for auction in auctions:
            auction['isOpen'] = is_open(auction, now)
        if active:
            auctions = [a for a in auctions if a['isOpen']]
        auctions.sort(key=lambda a: to_datetime(a.get('endTime')) or now)
        return {"auctions": auctions, "count": len(auctions)}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to list auctions", e)


@router.get("/auctions/{auction_id}")
async def get_auction(auction_id: str):
    try:
        auction = _require_auction(auction_id)
        auction['isOpen'] = is_open(auction, datetime.now(timezone.utc))
        return auction

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to get auction", e)


@router.post("/auctions/{auction_id}/bids")
async def place_bid(auction_id: str, bid: BidRequest, user_data: dict = Depends(verify_firebase_token)):
    """Bid on an open auction; a bid must beat the current bid"""
    try:
        auction = _require_auction(auction_id)
        if not is_open(auction, datetime.now(timezone.utc)):
            raise ValidationError("This auction has ended", 'auction_id', auction_id)

        amount = round_money(bid.amount)
        starting_bid = auction.get('startingBid', 0)
        current_bid = auction.get('currentBid') or 0
        if amount < starting_bid:
            raise ValidationError(f"Bid must be at least the starting bid of {starting_bid}", 'amount', amount)
        if auction.get('bidHistory') and amount <= current_bid:
            raise ValidationError(f"Bid must be higher than the current bid of {current_bid}", 'amount', amount)

        profile = UserService.get_user_by_uid(user_data['uid']) or {}
        entry = {
            'userId': user_data['uid'],
            'userName': profile.get('displayName') or user_data.get('name') or 'Bidder',
            'amount': amount,
            'timestamp': datetime.now(timezone.utc),
        }
        DatabaseService.update_document('auctions', auction_id, {
            'currentBid': amount,
            'bidHistory': [entry] + list(auction.get('bidHistory') or []),
        }, 'auction')
        logger.info(f"User {user_data['uid']} bid {amount} on auction {auction_id}")

        return {"success": True, "message": "Bid placed successfully", "currentBid": amount}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to place bid", e)


@router.post("/admin/auctions", status_code=status.HTTP_201_CREATED)
async def create_auction(auction: AuctionCreate, admin_data: dict = Depends(verify_admin_access)):
    try:
        auction_data = auction.model_dump()
        if to_datetime(auction_data['endTime']) <= datetime.now(timezone.utc):
            raise ValidationError("endTime must be in the future", 'endTime')

        auction_data.update({
            'currentBid': auction_data['startingBid'],
            'status': 'active',
            'bidHistory': [],
            'createdBy': admin_data.get('uid'),
            'createdAt': datetime.now(timezone.utc),
        })
        auction_id = DatabaseService.add_document('auctions', auction_data)
        return {"success": True, "message": "Auction created successfully", "auction_id": auction_id}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to create auction", e)


@router.post("/admin/auctions/{auction_id}/close")
async def close_auction(auction_id: str, admin_data: dict = Depends(verify_admin_access)):
    """Close an auction; the highest bid wins"""
    try:
        auction = _require_auction(auction_id)
        history = auction.get('bidHistory') or []
        winner = max(history, key=lambda b: b.get('amount', 0)) if history else None

        DatabaseService.update_document('auctions', auction_id, {
            'status': 'closed',
            'closedAt': datetime.now(timezone.utc),
            'winner': winner,
        }, 'auction')
        logger.info(f"Admin {admin_data.get('email')} closed auction {auction_id}")

        return {"success": True, "message": "Auction closed", "auction_id": auction_id, "winner": winner}

    except (StoreError, HTTPException):
        raise
    except Exception as e:
        raise internal_error("to close auction", e)
