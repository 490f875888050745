"""Application services: building, packaging and publishing release artifacts.

Services coordinate the release domain (release/) with external tools
(cargo, cross, gh, S3) and the filesystem.
"""
