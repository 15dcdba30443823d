"""
Community forum API.

Built on an ApiClient with expire_session_on_401 enabled: a 401 from any
forum call clears the stored user token and publishes the
authentication-expired event before the error reaches the caller.
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from market_navigator.api_client import ApiClient


@dataclass
class ForumPostDraft:
    """Body for creating or editing a post"""
    title: str
    content: str
    category: str
    tags: List[str] = field(default_factory=list)

    def to_payload(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "content": self.content,
            "category": self.category,
            "tags": list(self.tags),
        }


class ForumApi:
    """Forum endpoints"""

    def __init__(self, client: ApiClient):
        self.client = client

    async def get_posts(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None,
        featured: Optional[bool] = None
    ) -> Dict[str, Any]:
        """Posts with pagination and filters"""
        params = {
            "category": category,
            "search": search,
            "page": page,
            "limit": limit,
            "sortBy": sort_by,
            "sortOrder": sort_order,
            "featured": featured,
        }
        return await self.client.get("/forum/posts", params=params)

    async def get_post(self, post_id: str) -> Dict[str, Any]:
        """Single post with its comments"""
        return await self.client.get(f"/forum/posts/{post_id}")

    async def create_post(self, post: ForumPostDraft) -> Dict[str, Any]:
        return await self.client.post("/forum/posts", json=post.to_payload())

    async def update_post(self, post_id: str, post: ForumPostDraft) -> Dict[str, Any]:
        return await self.client.put(f"/forum/posts/{post_id}", json=post.to_payload())

    async def delete_post(self, post_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/forum/posts/{post_id}")

    async def add_comment(
        self,
        post_id: str,
        content: str,
        parent_comment_id: Optional[str] = None
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"content": content}
        if parent_comment_id:
            payload["parentCommentId"] = parent_comment_id
        return await self.client.post(f"/forum/posts/{post_id}/comments", json=payload)

    async def update_comment(self, comment_id: str, content: str) -> Dict[str, Any]:
        return await self.client.put(f"/forum/comments/{comment_id}", json={"content": content})

    async def delete_comment(self, comment_id: str) -> Dict[str, Any]:
        return await self.client.delete(f"/forum/comments/{comment_id}")

    async def toggle_post_like(self, post_id: str) -> Dict[str, Any]:
        return await self.client.post(f"/forum/posts/{post_id}/like")

    async def toggle_comment_like(self, comment_id: str) -> Dict[str, Any]:
        return await self.client.post(f"/forum/comments/{comment_id}/like")

    async def accept_answer(self, comment_id: str) -> Dict[str, Any]:
        """Mark a comment as the accepted answer"""
        return await self.client.post(f"/forum/comments/{comment_id}/accept")

    async def get_stats(self) -> Dict[str, Any]:
        return await self.client.get("/forum/stats")

    async def get_categories(self) -> Dict[str, Any]:
        """Categories with post counts"""
        return await self.client.get("/forum/categories")

    async def get_my_posts(
        self,
        page: Optional[int] = None,
        limit: Optional[int] = None,
        sort_by: Optional[str] = None,
        sort_order: Optional[str] = None
    ) -> Dict[str, Any]:
        params = {"page": page, "limit": limit, "sortBy": sort_by, "sortOrder": sort_order}
        return await self.client.get("/forum/my-posts", params=params)
