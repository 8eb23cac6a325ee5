from blogapp.config import get_settings
from blogapp.repositories import build_blogs_repository
from blogapp.repositories.memory import DEMO_BLOGS
from blogapp.schemas.blog import BlogCreate
from blogapp.storage import LocalImageStorage

settings = get_settings()

storage = LocalImageStorage(settings.media_root, settings.public_base_url, bucket=settings.image_bucket)
repository = build_blogs_repository(settings, storage)

existing = {blog.title for blog in repository.list_blogs()}

created = 0
for demo in reversed(DEMO_BLOGS):
    if demo["title"] in existing:
        continue
    repository.create(BlogCreate(**demo))
    created += 1

print("Database seeded successfully!")
print(f"  - backend: {settings.blogs_repository}")
print(f"  - {created} demo blogs created")
