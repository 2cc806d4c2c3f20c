"""
MedZeal Backend: Blog Service
==============================

What:  Blog posts (blogs/*): list, create with a thumbnail image, delete.
How:   The thumbnail is validated and written to local storage first; the blog
       node then references it by URL. If the push fails the file is removed.
       Deleting a post also removes its stored thumbnail.
"""

import logging
from typing import List, Optional

from medzeal.exceptions import StoreError, ValidationError
from medzeal.models import paths
from medzeal.models.clinic import BlogDocument
from medzeal.schemas.blog import BlogPost
from medzeal.services.credit_cycle import clinic_today
from medzeal.services.file_service import file_service
from medzeal.services.subscriptions import fetch, live_snapshots
from medzeal.services.tree import as_dict, text

logger = logging.getLogger(__name__)


class BlogService:
    async def list_posts(self, store) -> List[BlogPost]:
        tree = await live_snapshots.blogs.current(store)
        return [
            BlogPost(
                id=blog_id,
                title=text(raw.get("title")),
                content=text(raw.get("content")),
                date=text(raw.get("date")),
                thumbnail=text(raw.get("thumbnail")),
            )
            for blog_id, raw in ((k, as_dict(v)) for k, v in as_dict(tree).items())
        ]

    async def create_post(
        self,
        store,
        title: str,
        content: str,
        thumbnail_name: Optional[str],
        thumbnail: Optional[bytes],
        content_length: Optional[int] = None,
    ) -> BlogPost:
        """
        Raises:
            ValidationError: blank title/content, missing or invalid thumbnail
            FileStorageError: the thumbnail could not be written
            StoreError: the blog node could not be created
        """
        if not (title or "").strip():
            raise ValidationError(message="Title is required.", field="title")
        if not (content or "").strip():
            raise ValidationError(message="Content is required.", field="content")
        if not thumbnail:
            raise ValidationError(message="Thumbnail is required!", field="thumbnail")

        relative_path = await file_service.validate_and_store(thumbnail_name, thumbnail, content_length)
        document = BlogDocument(
            title=title.strip(),
            content=content,
            date=clinic_today().isoformat(),
            thumbnail=file_service.public_url(relative_path),
        )
        try:
            blog_id = await store.push(paths.BLOGS, document.to_document())
        except Exception as e:
            logger.error("Creating blog post failed: %s", e, exc_info=True)
            await file_service.cleanup_file(relative_path)
            raise StoreError(message="There was an error creating your blog post.")

        logger.info("Blog post %s created", blog_id)
        return BlogPost(id=blog_id, **document.to_document())

    async def delete_post(self, store, blog_id: str) -> None:
        blog_path = paths.blog_path(blog_id)
        existing = as_dict(await fetch(store, blog_path))
        try:
            await store.delete(blog_path)
        except Exception as e:
            logger.error("Deleting blog post %s failed: %s", blog_id, e, exc_info=True)
            raise StoreError(message="Failed to delete blog post. Please try again.")

        stored = file_service.relative_from_url(text(existing.get("thumbnail")))
        if stored:
            await file_service.cleanup_file(stored)
        live_snapshots.blogs.apply_local("", {blog_id: None})
        logger.info("Blog post %s deleted", blog_id)


blog_service = BlogService()
