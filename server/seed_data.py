#!/usr/bin/env python3
"""
Sample data for a fresh Legendary Signatures store

Seeds categories, products, video players, promo codes, banners,
testimonials and auctions. A collection that already holds documents is
skipped unless force is set; forced seeding overwrites the sample documents
it finds by key instead of adding copies. Used by the admin seed endpoint
and runnable as a script.
"""

from datetime import datetime, timedelta, timezone
import logging
import sys
from typing import Any, Callable, Dict, List, Optional

from firebase_init import db
from utils import generate_slug

logger = logging.getLogger(__name__)

SAMPLE_CATEGORIES = [
    {
        'name': 'Football Jerseys',
        'slug': 'football-jerseys',
        'description': "Authentic signed football jerseys from the world's greatest players",
        'imageUrl': '/images/football-collection-display.png',
        'featured': True,
        'order': 1,
    },
    {
        'name': 'Football Boots',
        'slug': 'football-boots',
        'description': 'Signed football boots worn by legendary players',
        'imageUrl': '/images/football-boots-display.png',
        'featured': False,
        'order': 2,
    },
    {
        'name': 'Photographs',
        'slug': 'photographs',
        'description': 'Signed photographs capturing iconic football moments',
        'imageUrl': '/images/football-photos-display.png',
        'featured': False,
        'order': 3,
    },
    {
        'name': 'Memorabilia',
        'slug': 'memorabilia',
        'description': 'Unique football memorabilia and collectibles',
        'imageUrl': '/images/football-memorabilia-display.png',
        'featured': True,
        'order': 4,
    },
]

SAMPLE_PRODUCTS = [
    {
        'title': 'Lionel Messi Signed Argentina Jersey',
        'type': 'shirt',
        'signedBy': 'Lionel Messi',
        'price': 1299.99,
        'featured': True,
        'imageUrl': '/images/messi-signed-jersey.png',
        'galleryImages': ['/images/messi-signed-jersey.png', '/images/messi-world-cup-jersey.png'],
        'description': "Authentic Argentina jersey signed by Lionel Messi, commemorating Argentina's 2022 World Cup victory.",
        'shortDescription': 'Authentic signed Messi Argentina jersey',
        'categoryId': 'football-jerseys',
        'tags': ['messi', 'argentina', 'world cup', 'football'],
        'certificateNumber': 'LS-MESSI-2022-001',
        'authenticity': {'verified': True, 'method': 'In-person signing', 'date': '2022-12-20'},
        'team': 'Argentina',
        'league': 'International',
        'season': '2022',
        'stock': 3,
    },
    {
        'title': 'Cristiano Ronaldo Signed Portugal Jersey',
        'type': 'shirt',
        'signedBy': 'Cristiano Ronaldo',
        'price': 1199.99,
        'featured': True,
        'imageUrl': '/images/ronaldo-signed-jersey.png',
        'description': "Authentic Portugal jersey signed by Cristiano Ronaldo, featuring his iconic number 7.",
        'shortDescription': 'Authentic signed Ronaldo Portugal jersey',
        'categoryId': 'football-jerseys',
        'tags': ['ronaldo', 'portugal', 'football'],
        'certificateNumber': 'LS-RONALDO-2022-001',
        'authenticity': {'verified': True, 'method': 'In-person signing', 'date': '2022-06-15'},
        'team': 'Portugal',
        'league': 'International',
        'season': '2022',
        'stock': 2,
    },
    {
        'title': 'Kylian Mbappé Signed France Jersey',
        'type': 'shirt',
        'signedBy': 'Kylian Mbappé',
        'price': 999.99,
        'featured': True,
        'imageUrl': '/images/mbappe-signed-jersey.png',
        'description': "Authentic France jersey signed by Kylian Mbappé.",
        'shortDescription': 'Authentic signed Mbappé France jersey',
        'categoryId': 'football-jerseys',
        'tags': ['mbappe', 'france', 'football'],
        'certificateNumber': 'LS-MBAPPE-2022-001',
        'authenticity': {'verified': True, 'method': 'In-person signing', 'date': '2022-07-10'},
        'team': 'France',
        'league': 'International',
        'season': '2022',
        'stock': 4,
    },
    {
        'title': 'Neymar Jr Signed Brazil Jersey',
        'type': 'shirt',
        'signedBy': 'Neymar Jr',
        'price': 899.99,
        'featured': False,
        'imageUrl': '/images/neymar-signed-jersey.png',
        'description': "Authentic Brazil jersey signed by Neymar Jr, featuring his signature number 10.",
        'shortDescription': 'Authentic signed Neymar Brazil jersey',
        'categoryId': 'football-jerseys',
        'tags': ['neymar', 'brazil', 'football'],
        'certificateNumber': 'LS-NEYMAR-2022-001',
        'authenticity': {'verified': True, 'method': 'In-person signing', 'date': '2022-05-20'},
        'team': 'Brazil',
        'league': 'International',
        'season': '2022',
        'stock': 5,
    },
]

SAMPLE_VIDEO_PLAYERS = [
    {
        'name': 'Lionel Messi',
        'position': 'Forward',
        'team': 'Inter Miami',
        'price': 499.99,
        'imageUrl': '/images/messi-video.png',
        'featured': True,
        'description': 'A personal message from the World Cup winner.',
    },
    {
        'name': 'Cristiano Ronaldo',
        'position': 'Forward',
        'team': 'Al Nassr',
        'price': 449.99,
        'imageUrl': '/images/ronaldo-video.png',
        'featured': True,
        'description': 'Birthday wishes, congratulations or motivation from CR7.',
    },
    {
        'name': 'Kylian Mbappé',
        'position': 'Forward',
        'team': 'Real Madrid',
        'price': 399.99,
        'imageUrl': '/images/mbappe-video.png',
        'featured': False,
        'description': 'A personalized shout-out from Kylian Mbappé.',
    },
]

SAMPLE_TESTIMONIALS = [
    {
        'name': 'Ahmed Al-Farsi',
        'role': 'Collector',
        'content': 'The authentication process was thorough and the certificate gives me complete confidence in my purchase.',
        'rating': 5,
        'featured': True,
        'approved': True,
        'days_ago': 15,
    },
    {
        'name': 'Sarah Thompson',
        'role': 'Football Fan',
        'content': 'The signed Ronaldo jersey arrived in perfect condition and looks even better in person.',
        'rating': 5,
        'featured': True,
        'approved': True,
        'days_ago': 30,
    },
    {
        'name': 'Michael Chen',
        'role': 'Sports Memorabilia Investor',
        'content': 'The best authentication and quality I have found. Delivered promptly and securely packaged.',
        'rating': 4,
        'featured': False,
        'approved': True,
        'days_ago': 45,
    },
]


def _products(now: datetime) -> List[Dict[str, Any]]:
    return [
        {**product, 'available': True, 'viewCount': 0, 'soldCount': 0, 'usesPlaceholder': False,
         'createdAt': now - timedelta(minutes=index), 'updatedAt': now}
        for index, product in enumerate(SAMPLE_PRODUCTS)
    ]


def _promo_codes(now: datetime) -> List[Dict[str, Any]]:
    return [
        {
            'code': '100100',
            'description': '10% off, up to 200',
            'discountType': 'percentage',
            'discountValue': 10,
            'maxDiscount': 200,
            'minOrderValue': 500,
            'usageLimit': 100,
            'usageCount': 0,
            'startDate': now,
            'endDate': now + timedelta(days=90),
            'isActive': True,
            'createdBy': 'seed',
            'createdAt': now,
        },
        {
            'code': '250250',
            'description': '250 off any order',
            'discountType': 'fixed',
            'discountValue': 250,
            'usageCount': 0,
            'startDate': now,
            'endDate': now + timedelta(days=30),
            'isActive': True,
            'createdBy': 'seed',
            'createdAt': now,
        },
    ]


def _banners(now: datetime) -> List[Dict[str, Any]]:
    return [
        {
            'title': 'Limited Edition Messi Jersey',
            'description': "Exclusive signed jersey from Argentina's World Cup victory",
            'imageUrl': '/images/limited-edition-messi-jersey.png',
            'mobileImageUrl': '/images/limited-edition-messi-jersey-mobile.png',
            'position': 'home_hero',
            'link': '/shop',
            'active': True,
            'startDate': now,
            'endDate': now + timedelta(days=30),
            'createdAt': now,
        },
        {
            'title': 'Football Legends Collection',
            'description': 'Authentic memorabilia from the greatest players',
            'imageUrl': '/images/football-hero-banner.png',
            'position': 'home_middle',
            'link': '/shop',
            'active': True,
            'startDate': now,
            'endDate': now + timedelta(days=60),
            'createdAt': now,
        },
    ]


def _testimonials(now: datetime) -> List[Dict[str, Any]]:
    testimonials = []
    for sample in SAMPLE_TESTIMONIALS:
        testimonial = {key: value for key, value in sample.items() if key != 'days_ago'}
        testimonial['date'] = now - timedelta(days=sample['days_ago'])
        testimonial['createdAt'] = testimonial['date']
        testimonials.append(testimonial)
    return testimonials


def _auctions(now: datetime) -> List[Dict[str, Any]]:
    return [
        {
            'playerName': 'Lionel Messi',
            'team': 'Argentina',
            'image': '/images/messi-signed-jersey.png',
            'startingBid': 500,
            'currentBid': 500,
            'endTime': now + timedelta(days=3),
            'status': 'active',
            'bidHistory': [],
            'createdAt': now,
        },
        {
            'playerName': 'Cristiano Ronaldo',
            'team': 'Portugal',
            'image': '/images/ronaldo-signed-jersey.png',
            'startingBid': 600,
            'currentBid': 600,
            'endTime': now + timedelta(hours=12),
            'status': 'active',
            'bidHistory': [],
            'createdAt': now,
        },
    ]


def _categories(now: datetime) -> List[Dict[str, Any]]:
    return [{**category, 'parentId': None, 'createdAt': now} for category in SAMPLE_CATEGORIES]


def _video_players(now: datetime) -> List[Dict[str, Any]]:
    return [{**player, 'available': True, 'createdAt': now} for player in SAMPLE_VIDEO_PLAYERS]


SEEDERS: Dict[str, Callable[[datetime], List[Dict[str, Any]]]] = {
    'categories': _categories,
    'products': _products,
    'videoPlayers': _video_players,
    'promoCodes': _promo_codes,
    'banners': _banners,
    'testimonials': _testimonials,
    'auctions': _auctions,
}
# Field identifying a sample document; categories are keyed by slug so
# product categoryId values resolve
KEY_FIELDS = {
    'categories': 'slug',
    'products': 'title',
    'videoPlayers': 'name',
    'promoCodes': 'code',
    'banners': 'title',
    'testimonials': 'name',
    'auctions': 'playerName',
}


def _document_ref(collection_ref, key_field: str, document: Dict[str, Any]):
    """The document already holding this key, else a new one whose id is the key's slug"""
    existing = list(collection_ref.where(key_field, '==', document[key_field]).limit(1).stream())
    if existing:
        return collection_ref.document(existing[0].id)
    return collection_ref.document(generate_slug(str(document[key_field])))


def seed_collection(collection_name: str, force: bool = False, now: datetime = None) -> Dict[str, Any]:
    """
    Write the sample documents of one collection

    Returns:
        dict: {collection, created, skipped}
    """
    collection_ref = db.collection(collection_name)
    if not force and list(collection_ref.limit(1).stream()):
        logger.info(f"Skipping {collection_name}: collection already has documents")
        return {'collection': collection_name, 'created': 0, 'skipped': True}

    now = now or datetime.now(timezone.utc)
    documents = SEEDERS[collection_name](now)
    key_field = KEY_FIELDS[collection_name]

    batch = db.batch()
    for document in documents:
        batch.set(_document_ref(collection_ref, key_field, document), document)
    batch.commit()

    logger.info(f"Seeded {len(documents)} documents into {collection_name}")
    return {'collection': collection_name, 'created': len(documents), 'skipped': False}


def seed_all(collections: Optional[List[str]] = None, force: bool = False) -> List[Dict[str, Any]]:
    """Seed the named collections, all known collections when none are named"""
    names = collections or list(SEEDERS)
    unknown = [name for name in names if name not in SEEDERS]
    if unknown:
        raise ValueError(f"Unknown seed collections: {', '.join(unknown)}")
    now = datetime.now(timezone.utc)
    return [seed_collection(name, force, now) for name in names]


def main():
    """Seed every collection from the command line; --force overwrites"""
    logging.basicConfig(level=logging.INFO)
    force = '--force' in sys.argv[1:]
    try:
        for result in seed_all(force=force):
            state = 'skipped' if result['skipped'] else f"created {result['created']}"
            print(f"{result['collection']:<14} {state}")
    except Exception as e:
        print(f"Error seeding data: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
