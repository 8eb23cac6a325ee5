"""Blog API: blog posts with likes and dislikes behind a GraphQL endpoint."""
