"""
YouTube download example.

Demonstrates fetching metadata and transcripts for a YouTube video, then
running the full download command.
"""

import asyncio
import logging

from ytfetch import DownloadOptions, YouTubeClient, organize_transcripts, run_download

# Configure logging to see ytfetch internal logs
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

async def main():
    # YouTube video URL
    youtube_url = "https://www.youtube.com/watch?v=eSPJsnYY6_4"

    client = YouTubeClient(timeout=600)

    # Metadata only
    info = await client.get_video_info(youtube_url)
    print(f"{info.title} by {info.uploader} ({info.duration}s)")

    # Subtitles only, converted to text
    files = await client.download_transcripts(youtube_url, "local/youtube_transcripts")
    for lang, tracks in organize_transcripts(files).items():
        print(f"{lang}: manual={tracks.manual} auto={tracks.auto}")

    # Everything: audio, transcripts, no compression
    options = DownloadOptions(output_dir="local/youtube_audio", audio_only=True)
    result = await run_download(youtube_url, options, client=client)
    print(f"Media file: {result.media_file}")

if __name__ == "__main__":
    asyncio.run(main())
