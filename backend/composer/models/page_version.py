from composer.extensions import db
from .base import BaseModel


class PageVersion(BaseModel):
    __tablename__ = "page_versions"

    page_id = db.Column(
        db.String(36),
        db.ForeignKey("pages.id"),
        nullable=False
    )

    version = db.Column(db.Integer, nullable=False)
    reason = db.Column(db.String(20), nullable=False)
    # create | update | save | autosave

    content = db.Column(db.Text, nullable=False, default="")

    created_by = db.Column(db.String(36), nullable=True)

    page = db.relationship("Page", back_populates="versions")

    __table_args__ = (
        db.UniqueConstraint("page_id", "version", name="uq_page_version"),
        db.Index("idx_page_version_page", "page_id"),
    )
