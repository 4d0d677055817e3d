import unittest

from myawesomelist.encoding import ParseOptions, decode_collection, parse_repository_url
from myawesomelist.entities.repository import RepositoryRef
from myawesomelist.services.exceptions import CollectionDecodeError

README = """# Awesome Go

Intro text with [a link](https://example.com).

## Contents

- [Actor Model](#actor-model)

## Actor Model

- [foo](https://github.com/x/foo) - does things
- [bar](https://github.com/y/bar) - Bar does - more things.
- plain item without a link

## Audio and Music

### Codecs

- [flac](https://github.com/mewkiz/flac) - FLAC codec.

### Players

- [beep](https://github.com/faiface/beep) - Playback.

## Resources

- [blog](https://blog.example.com/post) - A blog post.
"""


class TestDecodeCollection(unittest.TestCase):
    def test_actor_model_example(self):
        collection = decode_collection(
            "## Actor Model\n\n- [foo](https://github.com/x/foo) - does things\n",
            ParseOptions(start_section="Actor Model"),
        )

        self.assertEqual(len(collection.categories), 1)
        category = collection.categories[0]
        self.assertEqual(category.name, "Actor Model")
        self.assertEqual(len(category.projects), 1)
        project = category.projects[0]
        self.assertEqual(project.name, "foo")
        self.assertEqual(project.description, "does things")
        self.assertEqual(project.repo, RepositoryRef(hostname="github.com", owner="x", repo="foo"))

    def test_language_from_title(self):
        collection = decode_collection(README, ParseOptions(start_section="Actor Model"))

        self.assertEqual(collection.language, "Go")

    def test_start_section_skips_earlier_headings(self):
        collection = decode_collection(README, ParseOptions(start_section="Actor Model"))
        names = [c.name for c in collection.categories]

        self.assertNotIn("Contents", names)
        self.assertEqual(names[0], "Actor Model")

    def test_description_splits_on_first_separator(self):
        collection = decode_collection(README, ParseOptions(start_section="Actor Model"))
        bar = collection.find_category("Actor Model").projects[1]

        self.assertEqual(bar.description, "Bar does - more things.")

    def test_items_without_link_are_skipped(self):
        collection = decode_collection(README, ParseOptions(start_section="Actor Model"))

        self.assertEqual(
            [p.name for p in collection.find_category("Actor Model").projects],
            ["foo", "bar"],
        )

    def test_subsections_as_categories(self):
        collection = decode_collection(
            README,
            ParseOptions(start_section="Actor Model", subsection_as_category=True),
        )
        names = [c.name for c in collection.categories]

        self.assertIn("Audio and Music - Codecs", names)
        self.assertIn("Audio and Music - Players", names)
        self.assertNotIn("Audio and Music", names)

    def test_subsections_merge_without_option(self):
        collection = decode_collection(README, ParseOptions(start_section="Actor Model"))
        audio = collection.find_category("Audio and Music")

        self.assertEqual([p.name for p in audio.projects], ["flac", "beep"])

    def test_end_section_stops_parsing(self):
        collection = decode_collection(
            README,
            ParseOptions(start_section="Actor Model", end_section="Resources"),
        )

        self.assertIsNone(collection.find_category("Resources"))

    def test_non_repository_links_have_no_repo(self):
        collection = decode_collection(README, ParseOptions(start_section="Actor Model"))
        blog = collection.find_category("Resources").projects[0]

        self.assertEqual(blog.name, "blog")
        self.assertIsNone(blog.repo)

    def test_missing_start_section(self):
        with self.assertRaises(CollectionDecodeError):
            decode_collection(README, ParseOptions(start_section="Nope"))

    def test_bytes_input_and_owner(self):
        owner = RepositoryRef(owner="avelino", repo="awesome-go")
        collection = decode_collection(README.encode(), repo=owner)

        self.assertEqual(collection.repo, owner)
        self.assertEqual(collection.categories[0].name, "Contents")

    def test_invalid_utf8(self):
        with self.assertRaises(CollectionDecodeError):
            decode_collection(b"\xff\xfe# Awesome")


class TestParseRepositoryUrl(unittest.TestCase):
    def test_github_url_with_extra_path(self):
        self.assertEqual(
            parse_repository_url("https://github.com/a/b/tree/main/docs"),
            RepositoryRef(hostname="github.com", owner="a", repo="b"),
        )

    def test_relative_path_defaults_to_github(self):
        self.assertEqual(
            parse_repository_url("a/b"),
            RepositoryRef(hostname="github.com", owner="a", repo="b"),
        )

    def test_other_hosts_are_kept(self):
        self.assertEqual(
            parse_repository_url("https://gitlab.com/group/project"),
            RepositoryRef(hostname="gitlab.com", owner="group", repo="project"),
        )

    def test_anchors_are_not_repositories(self):
        self.assertIsNone(parse_repository_url("#actor-model"))
        self.assertIsNone(parse_repository_url("mailto:someone@example.com"))


if __name__ == "__main__":
    unittest.main()
