"""Neighborhood post queries.

Four read-only strategies, all ordered by ``created_at`` descending:

* administrative dong: posts whose stored ``admin_dong`` equals the caller's
* upper administrative dong: same, on ``upper_admin_dong``
* viewport: full scan, kept if the post lies inside the map rectangle
* radius: full scan, kept if within a great-circle distance (legacy mode)

The dong strategies return no posts when the caller's location cannot be
resolved; they never fall back to a geometric search.
"""
import logging
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Post, User
from app.schemas.post import (
    LocatedPost,
    Location,
    NearbyPostsResponse,
    NearbyUpperPostsResponse,
    PostSummary,
    RadiusPostsResponse,
    UpperPostSummary,
    ViewportParams,
    ViewportPostsResponse,
)
from app.services.region_resolver import KakaoRegionResolver
from app.utils.geo import Point, Viewport, is_in_viewport, is_within_radius

logger = logging.getLogger(__name__)

_SUMMARY_COLUMNS = (
    Post.id,
    Post.title,
    Post.image_url,
    Post.created_at,
    Post.admin_dong,
    User.nickname,
)


class NeighborhoodService:
    """Answers "what's nearby" for a location."""

    def __init__(self, db: AsyncSession, resolver: KakaoRegionResolver):
        self.db = db
        self.resolver = resolver

    async def _fetch(self, *columns, where=None) -> list[dict[str, Any]]:
        query = select(*columns).join(User, Post.user_id == User.id)
        if where is not None:
            query = query.where(where)
        query = query.order_by(Post.created_at.desc())
        result = await self.db.execute(query)
        return [dict(row._mapping) for row in result.all()]

    async def posts_in_admin_dong(self, location: Location) -> NearbyPostsResponse:
        resolution = await self.resolver.resolve_admin_dong(location.lon, location.lat)

        posts: list[PostSummary] = []
        if resolution.resolved:
            rows = await self._fetch(*_SUMMARY_COLUMNS, where=Post.admin_dong == resolution.label)
            posts = [PostSummary.model_validate(row) for row in rows]
        else:
            logger.info(f"Admin dong unresolved ({resolution.status.value}); returning no posts")

        return NearbyPostsResponse(
            message=f"Posts for your neighborhood ({resolution.value})",
            your_location=location,
            your_admin_dong=resolution.value,
            nearby_posts=posts,
        )

    async def posts_in_upper_admin_dong(self, location: Location) -> NearbyUpperPostsResponse:
        resolution = await self.resolver.resolve_upper_admin_dong(location.lon, location.lat)

        posts: list[UpperPostSummary] = []
        if resolution.resolved:
            rows = await self._fetch(
                *_SUMMARY_COLUMNS,
                Post.upper_admin_dong,
                where=Post.upper_admin_dong == resolution.label,
            )
            posts = [UpperPostSummary.model_validate(row) for row in rows]
            message = f"Posts for your upper neighborhood ({resolution.label})"
        else:
            message = f"Could not determine your upper neighborhood. {resolution.value}"

        return NearbyUpperPostsResponse(
            message=message,
            your_location=location,
            your_upper_admin_dong=resolution.value,
            nearby_posts=posts,
        )

    async def _all_located_posts(self) -> list[dict[str, Any]]:
        # Unbounded scan; filtering happens in memory
        return await self._fetch(*_SUMMARY_COLUMNS, Post.content, Post.lat, Post.lon)

    async def posts_in_viewport(self, params: ViewportParams) -> ViewportPostsResponse:
        viewport = Viewport(
            center_lat=params.center_lat,
            center_lon=params.center_lon,
            delta_lat=params.delta_lat,
            delta_lon=params.delta_lon,
        )
        rows = await self._all_located_posts()
        posts = [
            LocatedPost.model_validate(row)
            for row in rows
            if is_in_viewport(Point(row["lat"], row["lon"]), viewport)
        ]
        return ViewportPostsResponse(
            message="Posts within the specified viewport.",
            viewport=params,
            posts_in_viewport=posts,
        )

    async def posts_within_radius(self, location: Location, radius_km: float) -> RadiusPostsResponse:
        center = Point(location.lat, location.lon)
        rows = await self._all_located_posts()
        posts = [
            LocatedPost.model_validate(row)
            for row in rows
            if is_within_radius(center, Point(row["lat"], row["lon"]), radius_km)
        ]
        return RadiusPostsResponse(
            message=f"Posts within {radius_km} km of your location.",
            your_location=location,
            radius_km=radius_km,
            nearby_posts=posts,
        )
