"""
Core functionality for the audio extraction server.

This package contains modules for resolving YouTube sources, transcoding
audio with ffmpeg, and managing the artifacts left in the scratch directory.
"""
