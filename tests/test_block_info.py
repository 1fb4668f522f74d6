"""Tests for per-type side information injection."""

import unittest
from unittest.mock import Mock

import requests

from converters.block_info import BlockInfoInjector, embed_platform, file_name, video_platform
from converters.errors import MissingMediaError
from fetchers.link_preview import LinkPreview
from models import Block


def media_block(block_type, url, hosted='external', block_id='m1'):
    return Block.from_dict({
        'id': block_id,
        'type': block_type,
        block_type: {'type': hosted, hosted: {'url': url}, 'caption': []},
    })


def local_resolver():
    resolver = Mock()
    resolver.resolve.side_effect = lambda url, subfolder=None: (
        '/images/' + (f'{subfolder}/' if subfolder else '') + url.rsplit('/', 1)[-1]
    )
    return resolver


class TestPlatformDetection(unittest.TestCase):
    def test_youtube_watch_url(self):
        self.assertEqual(
            video_platform('https://www.youtube.com/watch?v=dQw4w9WgXcQ'),
            {'Plat': 'youtube', 'Id': 'dQw4w9WgXcQ'}
        )

    def test_youtube_short_url(self):
        self.assertEqual(video_platform('https://youtu.be/dQw4w9WgXcQ')['Id'], 'dQw4w9WgXcQ')

    def test_bilibili_video(self):
        self.assertEqual(
            video_platform('https://www.bilibili.com/video/BV1GJ411x7h7?p=1'),
            {'Plat': 'bilibili', 'Id': 'BV1GJ411x7h7'}
        )

    def test_unknown_video_platform(self):
        self.assertEqual(video_platform('https://vimeo.com/1234'), {'Plat': '', 'Id': ''})

    def test_embed_twitter(self):
        self.assertEqual(
            embed_platform('https://twitter.com/jack/status/20'),
            {'Plat': 'twitter', 'User': 'jack', 'Url': '20'}
        )

    def test_embed_x_dot_com(self):
        self.assertEqual(embed_platform('https://x.com/jack/status/20')['Plat'], 'twitter')

    def test_embed_host_ending_in_x_is_not_twitter(self):
        url = 'https://www.netflix.com/title/80100172'
        self.assertEqual(embed_platform(url), {'Plat': '', 'Url': url})

    def test_embed_gist(self):
        self.assertEqual(
            embed_platform('https://gist.github.com/octocat/6cad326836d38bd3a7ae'),
            {'Plat': 'gist', 'Url': 'octocat 6cad326836d38bd3a7ae'}
        )

    def test_embed_bilibili(self):
        self.assertEqual(
            embed_platform('https://www.bilibili.com/video/BV1GJ411x7h7'),
            {'Plat': 'bilibili', 'Url': 'BV1GJ411x7h7'}
        )

    def test_file_name_drops_extension_and_query(self):
        self.assertEqual(file_name('https://files.example.com/docs/report.final.pdf?sig=1'), 'report.final')


class TestBlockInfoInjector(unittest.TestCase):
    def setUp(self):
        self.resolver = local_resolver()
        self.previews = Mock()
        self.injector = BlockInfoInjector(self.resolver, self.previews)

    def test_image_is_rewritten_to_local_path(self):
        block = media_block('image', 'https://cdn.example.com/a.png')
        extra = {}

        result = self.injector.inject(block, extra)

        self.assertEqual(result.file.url, '/images/a.png')
        self.assertEqual(block.file.url, 'https://cdn.example.com/a.png')
        self.assertEqual(extra, {})

    def test_gallery_image_uses_subfolder(self):
        block = media_block('image', 'https://cdn.example.com/a.png')

        result = self.injector.inject(block, {}, media_subfolder='gallery')

        self.resolver.resolve.assert_called_once_with('https://cdn.example.com/a.png', 'gallery')
        self.assertEqual(result.file.url, '/images/gallery/a.png')

    def test_image_without_url_is_an_error(self):
        block = Block.from_dict({'id': 'm1', 'type': 'image', 'image': {'type': 'external', 'external': {}}})
        with self.assertRaises(MissingMediaError):
            self.injector.inject(block, {})

    def test_image_without_resolver_keeps_url(self):
        block = media_block('image', 'https://cdn.example.com/a.png')
        result = BlockInfoInjector().inject(block, {})
        self.assertEqual(result.file.url, 'https://cdn.example.com/a.png')

    def test_bookmark_preview(self):
        self.previews.fetch.return_value = LinkPreview(
            url='https://blog.example.com', title='Blog', description='Posts', image='https://blog.example.com/og.png'
        )
        block = Block.from_dict({'id': 'b1', 'type': 'bookmark', 'bookmark': {'url': 'https://blog.example.com'}})
        extra = {}

        self.injector.inject(block, extra)

        self.assertEqual(extra, {
            'Url': 'https://blog.example.com',
            'Title': 'Blog',
            'Description': 'Posts',
            'Image': 'https://blog.example.com/og.png',
        })

    def test_bookmark_without_preview_image(self):
        self.previews.fetch.return_value = LinkPreview(url='https://a.dev', title='A')
        block = Block.from_dict({'id': 'b1', 'type': 'bookmark', 'bookmark': {'url': 'https://a.dev'}})
        extra = {}

        self.injector.inject(block, extra)

        self.assertNotIn('Image', extra)
        self.assertEqual(extra['Title'], 'A')

    def test_bookmark_fetch_failure_propagates(self):
        self.previews.fetch.side_effect = requests.Timeout('slow')
        block = Block.from_dict({'id': 'b1', 'type': 'bookmark', 'bookmark': {'url': 'https://a.dev'}})

        with self.assertRaises(requests.Timeout):
            self.injector.inject(block, {})

    def test_external_video(self):
        block = media_block('video', 'https://www.youtube.com/watch?v=dQw4w9WgXcQ')
        extra = {}

        result = self.injector.inject(block, extra)

        self.assertEqual(extra['Plat'], 'youtube')
        self.assertEqual(extra['Id'], 'dQw4w9WgXcQ')
        self.assertEqual(extra['Url'], 'https://www.youtube.com/watch?v=dQw4w9WgXcQ')
        self.assertIs(result, block)
        self.resolver.resolve.assert_not_called()

    def test_uploaded_video_is_downloaded(self):
        block = media_block('video', 'https://s3.example.com/clip.mp4', hosted='file')
        extra = {}

        self.injector.inject(block, extra)

        self.assertEqual(extra, {'Plat': '', 'Id': '', 'Url': '/images/clip.mp4'})

    def test_embed(self):
        block = Block.from_dict({'id': 'e1', 'type': 'embed', 'embed': {'url': 'https://x.com/jack/status/20'}})
        extra = {}

        self.injector.inject(block, extra)

        self.assertEqual(extra, {'Plat': 'twitter', 'User': 'jack', 'Url': '20'})

    def test_embed_without_url_is_noop(self):
        block = Block.from_dict({'id': 'e1', 'type': 'embed', 'embed': {}})
        extra = {'SameBlockIdx': 0}

        self.injector.inject(block, extra)

        self.assertEqual(extra, {'SameBlockIdx': 0})

    def test_file_pdf_audio(self):
        for block_type, url, expected_name in [
            ('file', 'https://s3.example.com/x/notes.txt', 'notes'),
            ('pdf', 'https://s3.example.com/x/paper.pdf', 'paper'),
            ('audio', 'https://s3.example.com/x/song.mp3', 'song'),
        ]:
            with self.subTest(block_type=block_type):
                extra = {}
                self.injector.inject(media_block(block_type, url, hosted='file'), extra)
                self.assertEqual(extra['FileName'], expected_name)
                self.assertTrue(extra['Url'].startswith('/images/'))

    def test_callout(self):
        block = Block.from_dict({
            'id': 'c1',
            'type': 'callout',
            'callout': {
                'rich_text': [
                    {'type': 'text', 'text': {'content': 'Note'}},
                    {'type': 'text', 'text': {'content': ' this'}, 'annotations': {'bold': True}},
                ],
                'icon': {'type': 'emoji', 'emoji': '💡'},
            },
        })
        extra = {}

        self.injector.inject(block, extra)

        self.assertEqual(extra, {'Text': 'Note this', 'Emoji': '💡'})

    def test_other_types_pass_through(self):
        block = Block.from_dict({'id': 'p1', 'type': 'paragraph', 'paragraph': {'rich_text': []}})
        extra = {}

        self.assertIs(self.injector.inject(block, extra), block)
        self.assertEqual(extra, {})


if __name__ == '__main__':
    unittest.main()
