"""Cursor pagination models.

Cursor pagination is preferred where the service supports it. The
request-side model is turned into ``page[...]`` query parameters by
:func:`tenantdesk.utils.query.add_options`; the response-side model is
parsed by callers from the ``meta`` object of a list response.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CursorPagination(BaseModel):
    """Options for requesting a page of results by cursor.

    :param page_size: Number of results per page (most endpoints allow up to 100)
    :type page_size: Optional[int]
    :param page_after: The "next" cursor
    :type page_after: Optional[str]
    :param page_before: The "previous" cursor
    :type page_before: Optional[str]
    """

    model_config = ConfigDict(populate_by_name=True)

    page_size: Optional[int] = Field(None, alias="page[size]", ge=0)
    page_after: Optional[str] = Field(None, alias="page[after]")
    page_before: Optional[str] = Field(None, alias="page[before]")


class CursorPaginationMeta(BaseModel):
    """Pagination metadata returned with a page of results.

    :param has_more: True if more results exist after this page
    :type has_more: bool
    :param after_cursor: Cursor of the next result set
    :type after_cursor: Optional[str]
    :param before_cursor: Cursor of the previous result set
    :type before_cursor: Optional[str]
    """

    model_config = ConfigDict(extra="ignore")

    has_more: bool = False
    after_cursor: Optional[str] = None
    before_cursor: Optional[str] = None

    def next_page(self, page_size: Optional[int] = None) -> Optional[CursorPagination]:
        """Build options for the following page, if there is one.

        :param page_size: Optional page size to carry over
        :type page_size: Optional[int]
        :return: Options pointing after this page, or None when exhausted
        :rtype: Optional[CursorPagination]
        """
        if not self.has_more or not self.after_cursor:
            return None
        return CursorPagination(page_size=page_size, page_after=self.after_cursor)
