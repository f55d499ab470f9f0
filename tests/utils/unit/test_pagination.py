from utils.pagination import build_pagination, build_ticket_pagination


def test_middle_page():
    assert build_pagination(2, 10, 35) == {
        "currentPage": 2,
        "totalPages": 4,
        "totalRecords": 35,
        "recordsPerPage": 10,
        "hasNextPage": True,
        "hasPrevPage": True,
    }


def test_empty_result():
    pagination = build_pagination(1, 10, 0)

    assert pagination["totalPages"] == 0
    assert pagination["hasNextPage"] is False
    assert pagination["hasPrevPage"] is False


def test_last_page():
    pagination = build_pagination(4, 10, 40)

    assert pagination["hasNextPage"] is False


def test_ticket_pagination_shape():
    assert build_ticket_pagination(1, 20, 41) == {"page": 1, "limit": 20, "total": 41, "pages": 3}
