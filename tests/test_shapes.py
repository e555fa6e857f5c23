"""Tests for recursive array and shape validation."""

import pytest

from fluent_validator import ValidationError, Validator


def passthrough(v, key):
    pass


class TestIsArray:
    """Test is_array with and without an entry callback."""

    def test_type_check(self):
        """Test only lists, tuples and dicts pass."""
        Validator([]).is_array()
        Validator((1,)).is_array()
        Validator({"a": 1}).is_array()
        for value in ["abc", 1, None, object()]:
            with pytest.raises(ValidationError):
                Validator(value).is_array(error_message="Must be an array", data="field")

    def test_without_callback_keeps_value(self):
        """Test the value is untouched without a callback."""
        value = [1, 2, 3]
        assert Validator(value).is_array().get() is value

    def test_entries_are_rebuilt(self):
        """Test each entry is replaced with its child's final value."""
        v = Validator(["  a ", "b  b"]).is_array(lambda child, i: child.is_string().clean_string())
        assert v.get() == ["a", "b b"]

    def test_callback_receives_index(self):
        """Test sequences pass positional indices."""
        seen = []
        Validator(["x", "y", "z"]).is_array(lambda child, i: seen.append((i, child.get())))
        assert seen == [(0, "x"), (1, "y"), (2, "z")]

    def test_dict_keys(self):
        """Test dicts pass their keys and stay dicts."""
        v = Validator({"a": 1, "b": 2}).is_array(lambda child, key: child.transform(lambda n: n * 10))
        assert v.get() == {"a": 10, "b": 20}

    def test_tuple_stays_tuple(self):
        v = Validator((1, 2)).is_array(lambda child, i: child.transform(str))
        assert v.get() == ("1", "2")

    def test_children_are_independent(self):
        """Test each entry gets its own validator and cell."""
        children = []
        Validator([1, 2]).is_array(lambda child, i: children.append(child))
        assert children[0] is not children[1]
        assert children[0].cell is not children[1].cell

    def test_optional_entries(self):
        """Test locked children contribute their default."""
        v = Validator(["a", "", "c"]).is_array(lambda child, i: child.optional("-").is_string())
        assert v.get() == ["a", "-", "c"]

    def test_failure_aborts_and_keeps_value(self):
        """Test a failing entry stops iteration and leaves the parent intact."""
        visited = []

        def check(child, i):
            visited.append(i)
            child.is_int(f"Item {i} must be an integer", f"items.{i}").transform(lambda n: n * 2)

        original = [1, "two", 3]
        v = Validator(original)
        with pytest.raises(ValidationError) as exc_info:
            v.is_array(check)

        assert exc_info.value.data == "items.1"
        assert visited == [0, 1]
        assert v.get() is original
        assert original == [1, "two", 3]

    def test_chains_after_is_array(self):
        """Test the example from the array docs."""
        v = Validator([25, 12, 93, 27, 29])
        v.is_array(lambda child, i: child.is_int("Input must be an integer")).is_unique(
            "Array must not contain duplicate values"
        ).min(2, "Input must have at least 2 elements").max(5, "Input must have at most 5 elements")
        assert v.get() == [25, 12, 93, 27, 29]

    def test_locked_parent_skips_entries(self):
        """Test a locked validator never calls the callback."""
        calls = []
        v = Validator([]).optional().is_array(lambda child, i: calls.append(i))
        assert v.get() is None
        assert calls == []


class TestIsArrayOfShape:
    """Test is_array_of_shape."""

    def test_drops_unknown_keys(self):
        """Test only schema keys survive."""
        assert Validator({"a": 1, "b": 2}).is_array_of_shape({"a": passthrough}).get() == {"a": 1}

    def test_missing_key_is_none(self):
        """Test absent keys are validated as None."""
        seen = {}

        def record(child, key):
            seen[key] = child.get()

        v = Validator({"a": 1}).is_array_of_shape({"a": record, "b": record})
        assert seen == {"a": 1, "b": None}
        assert v.get() == {"a": 1, "b": None}

    def test_missing_key_can_be_optional(self):
        v = Validator({}).is_array_of_shape({"nick": lambda c, k: c.optional("anon").is_string()})
        assert v.get() == {"nick": "anon"}

    def test_schema_order(self):
        """Test callbacks run in schema order, not input order."""
        order = []
        Validator({"a": 1, "b": 2}).is_array_of_shape(
            {"b": lambda c, k: order.append(k), "a": lambda c, k: order.append(k)}
        )
        assert order == ["b", "a"]

    def test_aborts_on_first_failure(self):
        """Test later keys are never evaluated after a failure."""
        calls = {"b": 0}

        def count(child, key):
            calls["b"] += 1

        original = {"a": "x", "b": 2}
        v = Validator(original)
        with pytest.raises(ValidationError):
            v.is_array_of_shape({"a": lambda c, k: c.is_int("a must be an int", k), "b": count})

        assert calls["b"] == 0
        assert v.get() is original

    def test_list_input(self):
        """Test sequences are looked up by index."""
        v = Validator(["x", "y"]).is_array_of_shape({0: passthrough, 5: passthrough, "k": passthrough})
        assert v.get() == {0: "x", 5: None, "k": None}

    def test_requires_array(self):
        with pytest.raises(ValidationError):
            Validator("abc").is_array_of_shape({"a": passthrough})

    def test_without_schema(self):
        value = {"a": 1}
        assert Validator(value).is_array_of_shape().get() is value

    def test_nested_shapes(self):
        """Test shapes nest inside shapes and arrays."""
        data = {
            "username": "EinLinuus",
            "name": "Linus",
            "age": 19,
            "hobbies": ["programming ", " gaming"],
            "contact": {"email": "linus@example.com", "phone": "123456789", "fax": "x"},
            "extra": "dropped",
        }

        v = Validator(data)
        v.is_array_of_shape({
            "username": lambda v, k: v.is_string("Username must be a string", k)
                .clean_string()
                .transform(str.lower)
                .matches(r"^[a-z0-9]{3,16}$", "Username must be 3-16 characters", k)
                .is_not_one_of(["admin", "moderator"], "Username already taken", k),
            "name": lambda v, k: v.is_string("Name must be a string", k)
                .clean_string()
                .min(3, "Name must be at least 3 characters long", k)
                .max(32, "Name must be at most 32 characters long", k),
            "age": lambda v, k: v.is_int("Age must be an integer", k)
                .min(13, "You must be at least 13 years old", k),
            "hobbies": lambda v, k: v.is_array(
                lambda h, i: h.is_string("Hobby must be a string", f"hobbies.{i}")
                .clean_string()
                .min(1, "Hobby must be at least 1 character long", f"hobbies.{i}")
                .max(20, "Hobby must be at most 20 characters long", f"hobbies.{i}"),
                "Hobbies must be an array",
                k,
            ).max(5, "You can only enter 5 hobbies", k),
            "contact": lambda v, k: v.is_array_of_shape({
                "email": lambda v, k: v.is_email("Email must be valid", "contact.email"),
                "phone": lambda v, k: v.is_string("Phone must be a string", "contact.phone")
                    .matches(r"^[0-9]{9,16}$", "Phone must be 9-16 digits long", "contact.phone"),
            }),
        })

        assert v.get() == {
            "username": "einlinuus",
            "name": "Linus",
            "age": 19,
            "hobbies": ["programming", "gaming"],
            "contact": {"email": "linus@example.com", "phone": "123456789"},
        }

    def test_nested_failure_reports_path(self):
        """Test the data payload of a deep failure reaches the caller."""
        data = {"contact": {"email": "nope"}}
        with pytest.raises(ValidationError) as exc_info:
            Validator(data).is_array_of_shape({
                "contact": lambda v, k: v.is_array_of_shape({
                    "email": lambda v, k: v.is_email("Email must be valid", "contact.email"),
                }),
            })
        assert exc_info.value.data == "contact.email"
        assert exc_info.value.message == "Email must be valid"

    def test_optional_fields(self):
        """Test optional and conditionally optional fields."""
        data = {"gender": "", "name": "Linus", "public": False, "username": "EinLinuus"}

        v = Validator(data).is_array_of_shape({
            "name": lambda v, k: v.is_string(data=k).clean_string().min(3, data=k),
            "gender": lambda v, k: v.optional("unspecified").is_one_of(
                ["male", "female", "unspecified"], "Please enter a valid gender", k
            ),
            "public": lambda v, k: v.is_bool("Public must be a boolean", k),
            "username": lambda v, k: v.optional_if(not data["public"])
                .is_string(data=k)
                .min(3, data=k),
        })

        assert v.get() == {"name": "Linus", "gender": "unspecified", "public": False, "username": None}


class TestEndToEnd:
    """Test a full registration payload."""

    def test_underage_rejected(self):
        """Test the age branch raises and no result is produced."""
        payload = {"name": "  Bob  ", "age": 10}
        schema = {
            "name": lambda v, k: v.clean_string("name must be a string", k).min(1, "name is required", k),
            "age": lambda v, k: v.is_int("age must be an integer", k).min(13, "age must be at least 13", k),
        }

        v = Validator(payload)
        with pytest.raises(ValidationError) as exc_info:
            v.is_array_of_shape(schema)

        assert exc_info.value.message == "age must be at least 13"
        assert exc_info.value.data == "age"
        assert v.get() is payload

    def test_valid_payload(self):
        """Test the same schema accepts and cleans a valid payload."""
        schema = {
            "name": lambda v, k: v.clean_string("name must be a string", k).min(1, "name is required", k),
            "age": lambda v, k: v.is_int("age must be an integer", k).min(13, "age must be at least 13", k),
        }
        assert Validator({"name": "  Bob  ", "age": 21}).is_array_of_shape(schema).get() == {
            "name": "Bob",
            "age": 21,
        }

    def test_post_lookup(self):
        """Test ids validated against a lookup table and replaced by objects."""
        posts = [
            {"title": "Hello World", "status": "published"},
            {"title": "Hello World 2", "status": "draft"},
        ]

        def published(post):
            if post["status"] != "published":
                raise ValidationError("Pinned post must be published")

        schema = {
            "pinned_post": lambda v, k: v.is_int("Pinned post ID must be an integer")
                .is_one_of(range(len(posts)), "Pinned post ID must be a valid post ID")
                .transform(lambda i: posts[i])
                .validate(published),
            "likes": lambda v, k: v.is_unique("Likes must not contain duplicate values")
                .is_array(lambda v, i: v.is_int().is_one_of(range(len(posts))).transform(lambda i: posts[i])),
        }

        result = Validator({"pinned_post": 0, "likes": [0, 1]}).is_array_of_shape(schema).get()
        assert result["pinned_post"] is posts[0]
        assert result["likes"] == posts

        with pytest.raises(ValidationError, match="must be published"):
            Validator({"pinned_post": 1, "likes": []}).is_array_of_shape(schema)
        with pytest.raises(ValidationError, match="duplicate"):
            Validator({"pinned_post": 0, "likes": [1, 1]}).is_array_of_shape(schema)
