from composer.extensions import db
from .base import BaseModel
from .soft_delete_mixin import SoftDeleteMixin


class Page(BaseModel, SoftDeleteMixin):
    __tablename__ = 'pages'

    title = db.Column(db.String(200), nullable=False)
    slug = db.Column(db.String(200), nullable=False, unique=True, index=True)
    status = db.Column(db.String(50), default='draft', index=True)
    seo = db.Column(db.JSON(none_as_null=True), default=dict)

    # Encoded component list, see composer.domain.codec
    content = db.Column(db.Text, nullable=False, default="")

    created_by = db.Column(db.String(36), nullable=True)
    updated_by = db.Column(db.String(36), nullable=True)

    versions = db.relationship(
        "PageVersion",
        back_populates="page",
        order_by="PageVersion.version.desc()",
        cascade="all, delete-orphan",
        lazy="dynamic",
    )
