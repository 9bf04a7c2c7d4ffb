import json

from sqlmodel import select

from app.models.blog import Post, Tag

POSTS = "/api/v1/admin/posts"


def test_admin_routes_require_a_token(client):
    assert client.get(POSTS).status_code == 401
    assert client.get("/api/v1/admin/dashboard").status_code == 401
    assert client.get(POSTS, headers={"Authorization": "Bearer not-a-token"}).status_code == 401


class TestPostCrud:
    def test_create_fills_defaults(self, client, auth_headers, session):
        response = client.post(
            POSTS,
            json={
                "title": "My First Post",
                "content_markdown": "# Hello\n\nThis is **bold**.",
                "tags": ["Python", " ", "Web "],
                "published": True,
            },
            headers=auth_headers,
        )

        assert response.status_code == 201
        post = response.json()
        assert post["slug"] == "my-first-post"
        assert post["seo_title"] == "My First Post"
        assert post["seo_description"] == "Hello This is bold."
        assert post["tags"] == ["Python", "Web"]
        assert post["published_at"] is not None
        assert sorted(t.name for t in session.exec(select(Tag)).all()) == ["Python", "Web"]

    def test_draft_has_no_published_at(self, client, auth_headers):
        response = client.post(POSTS, json={"title": "Draft"}, headers=auth_headers)
        assert response.status_code == 201
        assert response.json()["published"] is False
        assert response.json()["published_at"] is None

    def test_title_is_required(self, client, auth_headers):
        response = client.post(POSTS, json={"title": "   "}, headers=auth_headers)
        assert response.status_code == 400

    def test_duplicate_slug_is_a_conflict(self, client, auth_headers, make_post):
        make_post("Existing", slug="taken")
        response = client.post(POSTS, json={"title": "New", "slug": "taken"}, headers=auth_headers)
        assert response.status_code == 409

    def test_unknown_category_is_rejected(self, client, auth_headers):
        response = client.post(POSTS, json={"title": "New", "category_id": "nope"}, headers=auth_headers)
        assert response.status_code == 400

    def test_invalid_image_url_is_rejected(self, client, auth_headers):
        response = client.post(
            POSTS,
            json={"title": "New", "featured_image_url": "https://example.com/page.html"},
            headers=auth_headers,
        )
        assert response.status_code == 400

    def test_get_update_delete(self, client, auth_headers, make_post, make_category):
        post_id = make_post("Original", content_markdown="Body")
        category_id = make_category("Travel")

        response = client.get(f"{POSTS}/{post_id}", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()["title"] == "Original"

        response = client.put(
            f"{POSTS}/{post_id}",
            json={"title": "Renamed", "category_id": category_id},
            headers=auth_headers,
        )
        assert response.status_code == 200
        updated = response.json()
        assert updated["title"] == "Renamed"
        assert updated["slug"] == "original"
        assert updated["content_markdown"] == "Body"
        assert updated["category_id"] == category_id

        assert client.delete(f"{POSTS}/{post_id}", headers=auth_headers).status_code == 200
        assert client.get(f"{POSTS}/{post_id}", headers=auth_headers).status_code == 404

    def test_update_can_keep_its_own_slug(self, client, auth_headers, make_post):
        post_id = make_post("Same", slug="same")
        response = client.put(f"{POSTS}/{post_id}", json={"slug": "same"}, headers=auth_headers)
        assert response.status_code == 200

    def test_missing_post(self, client, auth_headers):
        assert client.put(f"{POSTS}/missing", json={"title": "x"}, headers=auth_headers).status_code == 404
        assert client.delete(f"{POSTS}/missing", headers=auth_headers).status_code == 404


class TestPublishing:
    def test_toggle_sets_published_at_once(self, client, auth_headers, make_post):
        post_id = make_post("Draft", published=False)

        response = client.post(f"{POSTS}/{post_id}/toggle-publish", headers=auth_headers)
        assert response.status_code == 200
        patch = response.json()["patch"]
        assert patch["published"] is True
        assert "published_at" in patch

        response = client.post(f"{POSTS}/{post_id}/toggle-publish", headers=auth_headers)
        assert response.json()["patch"] == {"published": False}

        response = client.post(f"{POSTS}/{post_id}/toggle-publish", headers=auth_headers)
        # Already has a publish date
        assert response.json()["patch"] == {"published": True}

    def test_bulk_publish(self, client, auth_headers, make_post):
        ids = [make_post(f"Draft {i}", published=False) for i in range(3)]

        response = client.post(
            f"{POSTS}/bulk-publish", json={"ids": ids, "published": True}, headers=auth_headers
        )
        assert response.status_code == 200
        patches = response.json()["patches"]
        assert set(patches) == set(ids)
        assert all(p["published"] is True for p in patches.values())

        stats = client.get(POSTS, headers=auth_headers).json()["stats"]
        assert stats["published"] == 3

    def test_bulk_operations_are_all_or_nothing(self, client, auth_headers, make_post):
        ids = [make_post("One"), make_post("Two")]

        response = client.post(
            f"{POSTS}/bulk-delete", json={"ids": ids + ["missing"]}, headers=auth_headers
        )
        assert response.status_code == 404
        assert client.get(POSTS, headers=auth_headers).json()["stats"]["total"] == 2

        response = client.post(
            f"{POSTS}/bulk-publish", json={"ids": ids + ["missing"], "published": False}, headers=auth_headers
        )
        assert response.status_code == 404
        assert client.get(POSTS, headers=auth_headers).json()["stats"]["published"] == 2

    def test_bulk_delete(self, client, auth_headers, make_post):
        ids = [make_post("One"), make_post("Two")]
        keep = make_post("Three")

        response = client.post(f"{POSTS}/bulk-delete", json={"ids": ids}, headers=auth_headers)
        assert response.status_code == 200
        assert sorted(response.json()["deleted"]) == sorted(ids)

        remaining = client.get(POSTS, headers=auth_headers).json()["posts"]
        assert [p["id"] for p in remaining] == [keep]

    def test_bulk_needs_a_selection(self, client, auth_headers):
        response = client.post(f"{POSTS}/bulk-delete", json={"ids": []}, headers=auth_headers)
        assert response.status_code == 400


class TestPostList:
    def test_filters_and_stats(self, client, auth_headers, make_post, make_category):
        travel = make_category("Travel")
        make_post("Hello World", category_id=travel)
        make_post("apple", published=False)
        make_post("Banana")

        body = client.get(POSTS, params={"search": "WORLD"}, headers=auth_headers).json()
        assert [p["title"] for p in body["posts"]] == ["Hello World"]
        assert body["stats"] == {"total": 3, "published": 2, "draft": 1, "filtered": 1}
        assert body["has_active_filters"] is True

        body = client.get(POSTS, params={"status": "draft"}, headers=auth_headers).json()
        assert [p["title"] for p in body["posts"]] == ["apple"]

        body = client.get(POSTS, params={"category_id": travel}, headers=auth_headers).json()
        assert [p["title"] for p in body["posts"]] == ["Hello World"]

    def test_title_sort(self, client, auth_headers, make_post):
        for title in ("cherry", "Banana", "apple"):
            make_post(title)

        body = client.get(
            POSTS, params={"sort_field": "title", "sort_order": "asc"}, headers=auth_headers
        ).json()
        assert [p["title"] for p in body["posts"]] == ["apple", "Banana", "cherry"]
        assert body["has_active_filters"] is False
        assert body["filters"]["sort_field"] == "title"

    def test_invalid_status_is_rejected(self, client, auth_headers):
        response = client.get(POSTS, params={"status": "archived"}, headers=auth_headers)
        assert response.status_code == 422


def test_dashboard(client, auth_headers, make_post, make_category):
    make_category("Travel")
    make_post("One")
    make_post("Two", published=False)

    body = client.get("/api/v1/admin/dashboard", headers=auth_headers).json()
    assert body["totalPosts"] == 2
    assert body["publishedPosts"] == 1
    assert body["draftPosts"] == 1
    assert body["categoriesCount"] == 1
    assert body["tagsCount"] == 0
    assert len(body["recentPosts"]) == 2


class TestCategoriesAndTags:
    def test_category_crud(self, client, auth_headers):
        url = "/api/v1/admin/categories/"
        response = client.post(url, json={"name": "Travel Notes"}, headers=auth_headers)
        assert response.status_code == 201
        category = response.json()
        assert category["slug"] == "travel-notes"

        assert client.post(url, json={"name": "travel notes"}, headers=auth_headers).status_code == 409
        assert client.post(url, json={"name": "  "}, headers=auth_headers).status_code == 400

        response = client.put(f"{url}{category['id']}", json={"description": "Trips"}, headers=auth_headers)
        assert response.json()["description"] == "Trips"
        assert response.json()["name"] == "Travel Notes"

        assert [c["name"] for c in client.get(url, headers=auth_headers).json()] == ["Travel Notes"]
        assert client.delete(f"{url}{category['id']}", headers=auth_headers).status_code == 200
        assert client.get(f"{url}{category['id']}", headers=auth_headers).status_code == 404

    def test_tag_crud(self, client, auth_headers):
        url = "/api/v1/admin/tags/"
        response = client.post(url, json={"name": "Machine Learning"}, headers=auth_headers)
        assert response.status_code == 201
        tag = response.json()
        assert tag["slug"] == "machine-learning"

        assert client.post(url, json={"name": "Machine Learning"}, headers=auth_headers).status_code == 409

        response = client.put(f"{url}{tag['id']}", json={"name": "ML"}, headers=auth_headers)
        assert response.json()["name"] == "ML"

        assert client.delete(f"{url}{tag['id']}", headers=auth_headers).status_code == 200
        assert client.get(url, headers=auth_headers).json() == []


class TestSettings:
    def test_defaults_are_created_on_first_read(self, client, auth_headers):
        body = client.get("/api/v1/admin/settings/appearance", headers=auth_headers).json()
        assert body == {"primary_color": "#d97706", "secondary_color": "#78716c", "posts_per_page": 12}

    def test_account_is_null_until_saved(self, client, auth_headers):
        response = client.get("/api/v1/admin/settings/account", headers=auth_headers)
        assert response.status_code == 200
        assert response.json() is None

        client.put("/api/v1/admin/settings/account", json={"name": "Me"}, headers=auth_headers)
        assert client.get("/api/v1/admin/settings/account", headers=auth_headers).json() == {
            "name": "Me",
            "email": "",
        }

    def test_update_merges_shallowly(self, client, auth_headers):
        response = client.put(
            "/api/v1/admin/settings/system", json={"site_title": "Notes"}, headers=auth_headers
        )
        assert response.status_code == 200
        body = client.get("/api/v1/admin/settings/system", headers=auth_headers).json()
        assert body["site_title"] == "Notes"
        assert body["site_description"] == "A personal blog"

    def test_invalid_values_are_rejected(self, client, auth_headers):
        response = client.put(
            "/api/v1/admin/settings/appearance", json={"posts_per_page": "many"}, headers=auth_headers
        )
        assert response.status_code == 400

    def test_unknown_section(self, client, auth_headers):
        assert client.get("/api/v1/admin/settings/billing", headers=auth_headers).status_code == 422


class TestImportEndpoint:
    def test_streams_ndjson_events(self, client, auth_headers, session):
        csv_data = b"title,slug,content,category,tags,date\nHello,hello,Body,Travel,A,2023-05-01\n"
        response = client.post(
            "/api/v1/admin/import/",
            files={"file": ("posts.csv", csv_data, "text/csv")},
            headers=auth_headers,
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        events = [json.loads(line) for line in response.text.splitlines() if line]
        assert events[0] == {"type": "log", "message": "Found 1 posts in the file."}
        assert {"type": "progress", "progress": 100} in events
        assert events[-1] == {"type": "done", "message": "Import completed successfully."}

        assert session.exec(select(Post)).one().slug == "hello"

    def test_bad_file_streams_an_error(self, client, auth_headers):
        response = client.post(
            "/api/v1/admin/import/",
            files={"file": ("posts.csv", b'title,slug\n"oops,a\n', "text/csv")},
            headers=auth_headers,
        )
        events = [json.loads(line) for line in response.text.splitlines() if line]
        assert len(events) == 1
        assert events[0]["type"] == "error"


def test_non_positive_posts_per_page_is_stored_as_default(client, auth_headers):
    for value in (0, -5):
        response = client.put(
            "/api/v1/admin/settings/appearance", json={"posts_per_page": value}, headers=auth_headers
        )
        assert response.status_code == 200
        assert response.json()["posts_per_page"] == 12


def test_category_names_conflict_ignoring_non_ascii_case(client, auth_headers):
    url = "/api/v1/admin/categories/"
    assert client.post(url, json={"name": "Été"}, headers=auth_headers).status_code == 201
    assert client.post(url, json={"name": "été"}, headers=auth_headers).status_code == 409
