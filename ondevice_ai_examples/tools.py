#!/usr/bin/env python3
"""
Tools the model may call during generation.
"""

from __future__ import annotations

# Standard Library
from dataclasses import dataclass
import logging
from typing import Any, Protocol
import unicodedata

# PIP3 modules
from pydantic import BaseModel, ConfigDict, Field

#============================================


class Tool(Protocol):
	name: str
	description: str
	arguments_model: type[BaseModel]

	def call(self, arguments: dict[str, Any] | BaseModel) -> list[str]:
		"""
		Run the tool with model-supplied arguments and return text records.
		"""
		...


#============================================


MAX_PAINTING_RESULTS = 8


class PaintingQuery(BaseModel):
	model_config = ConfigDict(populate_by_name=True)

	search_term: str = Field(
		alias="searchTerm",
		description="The artist name, painting title, or art style to search for",
	)
	limit: int = Field(
		ge=1,
		le=MAX_PAINTING_RESULTS,
		description="The number of paintings to get",
	)


@dataclass(frozen=True, slots=True)
class Painting:
	title: str
	artist: str
	year: str
	description: str
	style: str
	museum: str
	dimensions: str
	medium: str
	significance: str


PAINTINGS: tuple[Painting, ...] = (
	Painting(
		title="Mona Lisa",
		artist="Leonardo da Vinci",
		year="1503-1519",
		description="The world's most famous portrait, known for the subject's enigmatic smile and da Vinci's sfumato technique",
		style="Renaissance",
		museum="Louvre Museum, Paris",
		dimensions="77 cm × 53 cm (30 in × 21 in)",
		medium="Oil on poplar panel",
		significance="Epitome of Renaissance portraiture and the most valuable painting in the world",
	),
	Painting(
		title="The Starry Night",
		artist="Vincent van Gogh",
		year="1889",
		description="A swirling night sky over a French village, painted during van Gogh's stay at a psychiatric hospital",
		style="Post-Impressionism",
		museum="Museum of Modern Art, New York",
		dimensions="73.7 cm × 92.1 cm (29 in × 36.25 in)",
		medium="Oil on canvas",
		significance="Most recognized work of art and symbol of artistic genius and mental struggle",
	),
	Painting(
		title="The Persistence of Memory",
		artist="Salvador Dalí",
		year="1931",
		description="Surrealist masterpiece featuring melting clocks in a dreamscape landscape",
		style="Surrealism",
		museum="Museum of Modern Art, New York",
		dimensions="24 cm × 33 cm (9.5 in × 13 in)",
		medium="Oil on canvas",
		significance="Iconic representation of Surrealism and the fluidity of time",
	),
	Painting(
		title="Girl with a Pearl Earring",
		artist="Johannes Vermeer",
		year="c. 1665",
		description="Mysterious portrait of a girl wearing an exotic dress and large pearl earring",
		style="Dutch Golden Age",
		museum="Mauritshuis, The Hague",
		dimensions="44.5 cm × 39 cm (17.5 in × 15.4 in)",
		medium="Oil on canvas",
		significance="Often called the 'Mona Lisa of the North' for its captivating subject",
	),
	Painting(
		title="The Great Wave off Kanagawa",
		artist="Katsushika Hokusai",
		year="c. 1831",
		description="Famous woodblock print depicting a giant wave threatening boats with Mount Fuji in the background",
		style="Ukiyo-e",
		museum="Various collections worldwide",
		dimensions="25.7 cm × 37.9 cm (10.1 in × 14.9 in)",
		medium="Woodblock print",
		significance="Most recognizable work of Japanese art and symbol of Japan's artistic heritage",
	),
	Painting(
		title="Guernica",
		artist="Pablo Picasso",
		year="1937",
		description="Powerful anti-war painting depicting the horrors of the bombing of Guernica during the Spanish Civil War",
		style="Cubism",
		museum="Museo Reina Sofía, Madrid",
		dimensions="349.3 cm × 776.6 cm (137.4 in × 305.5 in)",
		medium="Oil on canvas",
		significance="One of the most powerful anti-war paintings and symbol of peace",
	),
	Painting(
		title="The Birth of Venus",
		artist="Sandro Botticelli",
		year="c. 1484-1486",
		description="Mythological scene depicting Venus emerging from the sea as a fully grown woman",
		style="Renaissance",
		museum="Uffizi Gallery, Florence",
		dimensions="172.5 cm × 278.9 cm (67.9 in × 109.6 in)",
		medium="Tempera on canvas",
		significance="Masterpiece of Renaissance art and symbol of divine beauty",
	),
	Painting(
		title="American Gothic",
		artist="Grant Wood",
		year="1930",
		description="Iconic depiction of a farmer and his daughter standing beside a house with Gothic Revival styling",
		style="American Regionalism",
		museum="Art Institute of Chicago",
		dimensions="78 cm × 65.3 cm (30.7 in × 25.7 in)",
		medium="Oil on beaverboard",
		significance="Most parodied American painting and symbol of rural American values",
	),
)


#============================================


def _fold(text: str) -> str:
	"""
	Lowercase and strip diacritics so "dali" matches "Dalí".
	"""
	decomposed = unicodedata.normalize("NFKD", text)
	stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
	return stripped.casefold()


def _match_tier(painting: Painting, term: str) -> int | None:
	# title, artist, style, description, then medium
	fields = (
		painting.title,
		painting.artist,
		painting.style,
		painting.description,
		painting.medium,
	)
	for tier, value in enumerate(fields):
		if term in _fold(value):
			return tier
	return None


def search_paintings(query: PaintingQuery, paintings: tuple[Painting, ...] = PAINTINGS) -> list[Painting]:
	"""
	Find paintings matching a search term, best matches first.

	Args:
		query: Validated search term and result limit.
		paintings: Dataset to search.

	Returns:
		Up to query.limit paintings ranked by the field that matched, then title.
	"""
	term = _fold(query.search_term.strip())
	if not term:
		return []
	ranked: list[tuple[int, str, Painting]] = []
	for painting in paintings:
		tier = _match_tier(painting, term)
		if tier is None:
			continue
		ranked.append((tier, painting.title, painting))
	ranked.sort(key=lambda item: (item[0], item[1]))
	return [painting for _tier, _title, painting in ranked[: query.limit]]


def format_painting(painting: Painting) -> str:
	lines = [
		f"**{painting.title}** by {painting.artist} ({painting.year})",
		painting.description,
		f"Style: {painting.style} | Medium: {painting.medium}",
		f"Location: {painting.museum}",
		f"Dimensions: {painting.dimensions}",
		f"Significance: {painting.significance}",
	]
	return "\n".join(lines)


#============================================


class PaintingDatabaseTool:
	"""
	Searches a fixed in-memory database of famous paintings.
	"""

	name = "searchPaintingDatabase"
	description = "Searches a local database for famous paintings and artworks."
	arguments_model = PaintingQuery

	def call(self, arguments: dict[str, Any] | BaseModel) -> list[str]:
		if isinstance(arguments, PaintingQuery):
			query = arguments
		elif isinstance(arguments, BaseModel):
			query = PaintingQuery.model_validate(arguments.model_dump(by_alias=True))
		else:
			query = PaintingQuery.model_validate(arguments)
		matches = search_paintings(query)
		logging.debug(
			"%s: %d match(es) for %r (limit %d)",
			self.name,
			len(matches),
			query.search_term,
			query.limit,
		)
		return [format_painting(painting) for painting in matches]
