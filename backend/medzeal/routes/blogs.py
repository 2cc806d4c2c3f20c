"""
MedZeal Backend: Blog Routes
=============================

POST /api/blogs is multipart: `title`, `content` and the `thumbnail` image.
Stored thumbnails are served back from /api/files/{path}.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from fastapi.responses import FileResponse

from medzeal.database import RealtimeStore, get_store
from medzeal.schemas.blog import BlogPost
from medzeal.schemas.common import ErrorResponse, MessageResponse
from medzeal.services.blog_service import blog_service
from medzeal.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Blogs"])


@router.get("/blogs", response_model=List[BlogPost], summary="List blog posts")
async def list_blogs(store: RealtimeStore = Depends(get_store)) -> List[BlogPost]:
    return await blog_service.list_posts(store)


@router.post(
    "/blogs",
    status_code=201,
    response_model=BlogPost,
    responses={
        400: {"description": "Missing field or invalid thumbnail", "model": ErrorResponse},
        500: {"description": "Thumbnail or blog could not be saved", "model": ErrorResponse},
    },
    summary="Create a blog post",
)
async def create_blog(
    title: str = Form(default=""),
    content: str = Form(default=""),
    thumbnail: Optional[UploadFile] = File(default=None, description="PNG, JPEG or WebP image"),
    store: RealtimeStore = Depends(get_store),
) -> BlogPost:
    data = await thumbnail.read() if thumbnail is not None else None
    logger.info("Blog upload: thumbnail=%s (%d bytes)",
                thumbnail.filename if thumbnail else None, len(data or b""))
    return await blog_service.create_post(
        store,
        title=title,
        content=content,
        thumbnail_name=thumbnail.filename if thumbnail else None,
        thumbnail=data,
        content_length=thumbnail.size if thumbnail else None,
    )


@router.delete("/blogs/{blog_id}", response_model=MessageResponse, summary="Delete a blog post")
async def delete_blog(blog_id: str, store: RealtimeStore = Depends(get_store)) -> MessageResponse:
    await blog_service.delete_post(store, blog_id)
    return MessageResponse(message="Blog post deleted successfully!", id=blog_id)


@router.get(
    "/files/{file_path:path}",
    responses={200: {"description": "Image file"}, 404: {"description": "File not found"}},
    summary="Serve a stored thumbnail",
)
async def serve_file(file_path: str) -> FileResponse:
    path = file_service.resolve(file_path)
    return FileResponse(path=str(path), headers={"Cache-Control": "public, max-age=86400"})
