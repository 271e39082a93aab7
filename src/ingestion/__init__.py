"""YouTube document ingestion.

This package scrapes a YouTube video's captions, splits the title-prefixed
transcript into overlapping chunks, embeds them and stores them in a Supabase
vector table for later semantic retrieval.
"""
