"""
Brand / franchise / genre lexicon.
Maps a canonical head term to its aliases (synonyms, translations, stylized
names) and to company hints used for company-scoped retrieval.
The table is built once at import time and exposed read-only.
"""

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, List, Mapping, Optional, Pattern, Tuple

from loguru import logger


def normalize(text: Optional[str]) -> str:
	"""Trim, collapse inner whitespace and lowercase. normalize(normalize(x)) == normalize(x)."""
	if not text:
		return ""
	return " ".join(text.split()).lower()


def normalize_key(text: Optional[str]) -> str:
	"""Normalized form with every space removed ("디즈니 플러스" -> "디즈니플러스")."""
	return normalize(text).replace(" ", "")


def uniq_strings(values: Iterable[Optional[str]]) -> List[str]:
	"""De-duplicate by normalized form, drop blanks, keep the first spelling seen."""
	out: List[str] = []
	seen = set()
	for value in values:
		text = (value or "").strip()
		if not text:
			continue
		key = normalize(text)
		if key in seen:
			continue
		seen.add(key)
		out.append(text)
	return out


@dataclass(frozen=True)
class LexiconEntry:
	aliases: Tuple[str, ...]
	company_hints: Tuple[str, ...] = ()


@dataclass(frozen=True)
class HashtagRule:
	pattern: Pattern
	key: str

	def matches(self, text: str) -> bool:
		return self.pattern.search(text) is not None


def entry(aliases: List[str], company_hints: Optional[List[str]] = None) -> LexiconEntry:
	return LexiconEntry(
		aliases=tuple(uniq_strings(aliases)),
		company_hints=tuple(uniq_strings(company_hints or [])),
	)


def rule(pattern: str, key: str) -> HashtagRule:
	return HashtagRule(pattern=re.compile(pattern, re.I), key=key)


STOPWORDS_KO = frozenset(normalize(s) for s in [
	"추천", "추천해", "추천해줘", "추천좀", "영화", "드라마", "시리즈", "작품",
	"컨텐츠", "콘텐츠", "보고싶어", "보고 싶어", "볼만한", "비슷한", "같은", "느낌",
	"분위기", "장르", "종류", "전부", "위주", "중", "더", "좀", "제발", "해주세요",
	"해줘", "찾아줘", "알려줘", "보고싶은",
])

STOPWORDS_EN = frozenset(normalize(s) for s in [
	"recommend", "recommendation", "please", "movie", "movies", "film", "films",
	"tv", "series", "show", "shows", "like", "similar", "something", "anything",
	"a", "an", "and", "or", "the", "of", "to", "for", "in", "on", "with",
	"about",
])

JUNK_TOKENS = frozenset([
	"", " ", "\n", "\t", ",", ".", "…", "!", "?", ":", ";", "/", "\\", "|", "-",
	"_", "~", "`", '"', "'", "“", "”", "(", ")", "[", "]", "{", "}", "<", ">",
	"@", "#", "$", "%", "^", "&", "*", "+", "=",
])

NEGATION_PATTERNS: Tuple[str, ...] = (
	# en
	"no", "not", "don't", "dont", "without", "avoid", "exclude", "except", "excluding",
	# ko
	"안", "않", "싫", "싫어", "싫은", "빼고", "제외", "말고", "없이",
)

# Generic terms that would inflate every candidate equally when used for boosting
KEYWORD_STOPLIST = frozenset(normalize(s) for s in [
	"추천", "영화", "드라마", "애니", "애니메이션", "작품", "컨텐츠", "콘텐츠",
	"보고싶어", "보고 싶어", "비슷한", "같은", "느낌", "분위기",
])

# Display tags shown next to a result list
TAG_STOPWORDS = frozenset([
	"추천", "영화", "드라마", "애니", "애니메이션", "시리즈", "작품", "콘텐츠",
	"컨텐츠", "보고", "싶어", "싶은", "좀", "진짜", "그냥", "완전", "느낌",
	"비슷한", "같은", "찾아줘", "부탁",
])


_TABLE = {
	# ==================================================================
	# Disney / Pixar / Marvel / Lucasfilm / 20th Century / Searchlight
	# ==================================================================
	"디즈니": entry(
		[
			"Disney", "Walt Disney Animation Studios", "Disney Animation",
			"Walt Disney", "Walt Disney Pictures", "Walt Disney Studios",
			"Disney Pictures", "디즈니", "디즈니 애니메이션", "월트 디즈니",
		],
		["Walt Disney Pictures", "Walt Disney Animation Studios", "Walt Disney Studios"],
	),
	"disney": entry(
		["Disney", "Walt Disney", "Walt Disney Pictures", "Walt Disney Animation Studios"],
		["Walt Disney Pictures", "Walt Disney Animation Studios"],
	),
	"walt disney": entry(["Walt Disney", "Walt Disney Pictures"], ["Walt Disney Pictures"]),
	"walt disney pictures": entry(["Walt Disney Pictures", "Disney Pictures"], ["Walt Disney Pictures"]),
	"walt disney animation": entry(
		["Walt Disney Animation", "Walt Disney Animation Studios", "Disney Animation Studios", "Disney Animation"],
		["Walt Disney Animation Studios"],
	),
	"디즈니플러스": entry(
		["디즈니플러스", "디즈니 플러스", "Disney+", "Disney Plus", "디플", "디즈니+"],
		["Disney"],
	),
	"disney+": entry(["Disney+", "Disney Plus"], ["Disney"]),
	"20세기폭스": entry(
		["20세기폭스", "20th Century Fox", "20th Century", "20세기 스튜디오"],
		["20th Century Studios", "20th Century Fox"],
	),
	"20th century": entry(
		["20th Century", "20th Century Fox", "20th Century Studios"],
		["20th Century Studios", "20th Century Fox"],
	),
	"searchlight": entry(
		["Searchlight", "Searchlight Pictures", "폭스 서치라이트", "서치라이트"],
		["Searchlight Pictures"],
	),
	"touchstone": entry(["Touchstone", "Touchstone Pictures", "터치스톤"], ["Touchstone Pictures"]),
	"pixar": entry(["Pixar", "픽사", "Pixar Animation Studios"], ["Pixar Animation Studios"]),
	"픽사": entry(["픽사", "Pixar", "Pixar Animation Studios"], ["Pixar Animation Studios"]),
	"마블": entry(["마블", "Marvel", "Marvel Studios", "MCU", "마블 스튜디오"], ["Marvel Studios"]),
	"marvel": entry(["Marvel", "Marvel Studios", "MCU"], ["Marvel Studios"]),
	"mcu": entry(["MCU", "Marvel Cinematic Universe", "마블 시네마틱 유니버스"], ["Marvel Studios"]),
	"lucasfilm": entry(["Lucasfilm", "루카스필름"], ["Lucasfilm"]),
	"스타워즈": entry(["스타워즈", "Star Wars", "루카스필름", "Lucasfilm"], ["Lucasfilm"]),
	"star wars": entry(["Star Wars", "Lucasfilm"], ["Lucasfilm"]),

	# ==================================================================
	# Warner Bros / DC / HBO / Cartoon Network
	# ==================================================================
	"워너": entry(
		["워너", "Warner", "Warner Bros", "Warner Bros.", "Warner Bros Pictures", "워너브라더스"],
		["Warner Bros. Pictures", "Warner Bros."],
	),
	"warner": entry(["Warner", "Warner Bros", "Warner Bros. Pictures"], ["Warner Bros. Pictures"]),
	"warner bros": entry(["Warner Bros", "Warner Bros.", "Warner Brothers"], ["Warner Bros."]),
	"new line cinema": entry(["New Line Cinema", "New Line", "뉴라인 시네마"], ["New Line Cinema"]),
	"dc": entry(["DC", "DC Comics", "DC Films", "DC Studios", "디씨"], ["DC Films", "DC Studios"]),
	"디씨": entry(["디씨", "DC", "DC Films", "DC Studios"], ["DC Films", "DC Studios"]),
	"hbo": entry(["HBO", "HBO Originals", "HBO Max", "Max", "에이치비오"], ["HBO"]),
	"hbo max": entry(["HBO Max", "HBOMax", "Max", "HBO맥스"], ["HBO"]),
	"cartoon network": entry(["Cartoon Network", "CN", "카툰네트워크"], ["Cartoon Network"]),
	"adult swim": entry(["Adult Swim", "어덜트스윔"], ["Adult Swim"]),

	# ==================================================================
	# Universal / Focus / DreamWorks / Illumination / Blumhouse / Peacock
	# ==================================================================
	"유니버설": entry(["유니버설", "Universal", "Universal Pictures", "유니버설 픽처스"], ["Universal Pictures"]),
	"universal": entry(["Universal", "Universal Pictures"], ["Universal Pictures"]),
	"focus features": entry(["Focus Features", "Focus", "포커스 피처스"], ["Focus Features"]),
	"working title": entry(["Working Title", "Working Title Films", "워킹 타이틀"], ["Working Title Films"]),
	"블룸하우스": entry(["Blumhouse", "블룸하우스", "Blumhouse Productions"], ["Blumhouse Productions"]),
	"blumhouse": entry(["Blumhouse", "Blumhouse Productions"], ["Blumhouse Productions"]),
	"드림웍스": entry(["드림웍스", "DreamWorks", "DreamWorks Animation"], ["DreamWorks Animation"]),
	"dreamworks": entry(["DreamWorks", "DreamWorks Animation"], ["DreamWorks Animation"]),
	"illumination": entry(["Illumination", "일루미네이션", "Illumination Entertainment"], ["Illumination Entertainment"]),
	"일루미네이션": entry(["일루미네이션", "Illumination"], ["Illumination Entertainment"]),
	"peacock": entry(["Peacock", "피콕", "NBC Peacock"], ["NBCUniversal"]),

	# ==================================================================
	# Paramount / Nickelodeon / CBS / Showtime
	# ==================================================================
	"paramount": entry(
		["Paramount", "파라마운트", "Paramount Pictures", "Paramount+", "Paramount Plus"],
		["Paramount Pictures"],
	),
	"파라마운트": entry(["파라마운트", "Paramount", "Paramount Pictures"], ["Paramount Pictures"]),
	"paramount+": entry(["Paramount+", "Paramount Plus", "파라마운트+", "파플"], ["Paramount Pictures"]),
	"nickelodeon": entry(["Nickelodeon", "니켈로디언", "Nickelodeon Movies"], ["Nickelodeon"]),
	"cbs": entry(["CBS", "CBS Studios"], ["CBS"]),
	"showtime": entry(["Showtime", "쇼타임"], ["Showtime"]),

	# ==================================================================
	# Sony / Columbia / TriStar / Crunchyroll
	# ==================================================================
	"소니": entry(
		["소니", "Sony", "Sony Pictures", "Sony Pictures Entertainment", "소니픽처스"],
		["Sony Pictures", "Sony Pictures Entertainment"],
	),
	"sony": entry(["Sony", "Sony Pictures", "Sony Pictures Entertainment"], ["Sony Pictures"]),
	"columbia": entry(["Columbia", "Columbia Pictures", "컬럼비아", "콜럼비아"], ["Columbia Pictures"]),
	"tristar": entry(["TriStar", "TriStar Pictures", "트라이스타"], ["TriStar Pictures"]),
	"screen gems": entry(["Screen Gems", "스크린젬스"], ["Screen Gems"]),
	"sony pictures animation": entry(["Sony Pictures Animation", "소니 애니메이션"], ["Sony Pictures Animation"]),
	"crunchyroll": entry(["Crunchyroll", "크런치롤"], ["Crunchyroll"]),
	"aniplex": entry(["Aniplex", "애니플렉스"], ["Aniplex"]),

	# ==================================================================
	# Amazon / MGM / Apple / Lionsgate / A24 / Miramax / Legendary
	# ==================================================================
	"아마존": entry(
		["아마존", "Amazon", "Prime Video", "Amazon MGM Studios", "아마프라", "프라임비디오"],
		["Amazon MGM Studios"],
	),
	"prime video": entry(["Prime Video", "Amazon Prime Video", "프라임비디오", "프라임"], ["Amazon MGM Studios"]),
	"mgm": entry(["MGM", "Metro-Goldwyn-Mayer", "메트로 골드윈 메이어"], ["Metro-Goldwyn-Mayer"]),
	"amazon studios": entry(["Amazon Studios"], ["Amazon Studios"]),
	"애플tv": entry(["애플tv", "Apple TV+", "Apple TV Plus", "Apple TV", "애플티비"], ["Apple"]),
	"apple tv+": entry(["Apple TV+", "Apple TV Plus", "애플tv+", "애플티비+"], ["Apple"]),
	"라이언스게이트": entry(["라이언스게이트", "Lionsgate", "Lions Gate"], ["Lionsgate"]),
	"lionsgate": entry(["Lionsgate", "Lions Gate"], ["Lionsgate"]),
	"a24": entry(["A24", "에이투포", "A-24"], ["A24"]),
	"miramax": entry(["Miramax", "미라맥스"], ["Miramax"]),
	"legendary": entry(["Legendary", "레전더리", "Legendary Pictures"], ["Legendary Pictures"]),
	"skydance": entry(["Skydance", "스카이댄스", "Skydance Media"], ["Skydance Media"]),

	# ==================================================================
	# Streaming platforms
	# ==================================================================
	"넷플릭스": entry(["넷플릭스", "넷플", "Netflix", "Netflix Original", "넷플 오리지널"], ["Netflix"]),
	"netflix": entry(["Netflix", "Netflix Original"], ["Netflix"]),
	"hulu": entry(["Hulu", "훌루"], ["Hulu"]),
	"starz": entry(["Starz", "스타즈"], ["Starz"]),
	"shudder": entry(["Shudder", "셔더"], ["Shudder"]),
	"mubi": entry(["MUBI", "무비"], ["MUBI"]),
	"criterion channel": entry(["Criterion Channel", "크라이테리언"], ["The Criterion Collection"]),

	# ==================================================================
	# Japan: majors and anime studios
	# ==================================================================
	"toei": entry(["Toei", "Toei Animation", "토에이", "토에이 애니"], ["Toei Animation"]),
	"토에이": entry(["토에이", "Toei", "Toei Animation"], ["Toei Animation"]),
	"toho": entry(["TOHO", "Toho", "도호"], ["TOHO"]),
	"kadokawa": entry(["KADOKAWA", "Kadokawa", "카도카와"], ["KADOKAWA"]),
	"지브리": entry(
		["지브리", "Studio Ghibli", "Ghibli", "스튜디오 지브리", "미야자키", "Miyazaki", "하야오"],
		["Studio Ghibli"],
	),
	"ghibli": entry(["Studio Ghibli", "Ghibli"], ["Studio Ghibli"]),
	"miyazaki": entry(["Miyazaki", "Hayao Miyazaki", "미야자키", "하야오"], ["Studio Ghibli"]),
	"신카이": entry(["신카이", "Makoto Shinkai", "Shinkai", "신카이 마코토"], ["CoMix Wave Films"]),
	"호소다": entry(["호소다", "Mamoru Hosoda", "Hosoda", "호소다 마모루"], ["Studio Chizu"]),
	"sunrise": entry(["Sunrise", "선라이즈", "Bandai Namco Filmworks"], ["Sunrise", "Bandai Namco Filmworks"]),
	"madhouse": entry(["MADHOUSE", "Madhouse", "매드하우스"], ["Madhouse"]),
	"mappa": entry(["MAPPA", "Mappa", "마파"], ["MAPPA"]),
	"bones": entry(["BONES", "Bones", "본즈"], ["Bones"]),
	"kyoto animation": entry(["Kyoto Animation", "KyoAni", "쿄애니", "교토 애니메이션"], ["Kyoto Animation"]),
	"ufotable": entry(["ufotable", "유포테이블"], ["ufotable"]),
	"wit studio": entry(["Wit Studio", "WIT", "위트 스튜디오"], ["Wit Studio"]),
	"production i.g": entry(["Production I.G", "프로덕션 I.G"], ["Production I.G"]),
	"a-1 pictures": entry(["A-1 Pictures", "A1", "A-1", "에이원픽쳐스"], ["A-1 Pictures"]),
	"cloverworks": entry(["CloverWorks", "클로버웍스"], ["CloverWorks"]),
	"trigger": entry(["TRIGGER", "Trigger", "트리거"], ["Trigger"]),
	"pierrot": entry(["Pierrot", "Studio Pierrot", "스튜디오 피에로", "피에로"], ["Studio Pierrot"]),

	# ==================================================================
	# Korea: broadcasters, platforms, studios
	# ==================================================================
	"cj": entry(["CJ", "CJ ENM", "씨제이"], ["CJ ENM"]),
	"cj enm": entry(["CJ ENM", "CJ", "tvN"], ["CJ ENM"]),
	"스튜디오드래곤": entry(["스튜디오드래곤", "Studio Dragon"], ["Studio Dragon"]),
	"jtbc": entry(["JTBC", "제이티비씨"], ["JTBC"]),
	"tvn": entry(["tvN", "티비엔"], ["tvN"]),
	"kbs": entry(["KBS"], ["KBS"]),
	"sbs": entry(["SBS"], ["SBS"]),
	"mbc": entry(["MBC"], ["MBC"]),
	"tving": entry(["TVING", "티빙"], ["TVING"]),
	"웨이브": entry(["웨이브", "Wavve"], ["Wavve"]),
	"쿠팡플레이": entry(["쿠팡플레이", "Coupang Play"], ["Coupang Play"]),
	"왓챠": entry(["왓챠", "WATCHA", "Watcha"], ["Watcha"]),
	"쇼박스": entry(["쇼박스", "Showbox"], ["Showbox"]),

	# ==================================================================
	# Franchises
	# ==================================================================
	"원피스": entry(["원피스", "One Piece", "와노쿠니", "밀짚모자"]),
	"one piece": entry(["One Piece", "원피스"]),
	"나루토": entry(["나루토", "Naruto"]),
	"귀멸": entry(["귀멸의칼날", "귀멸", "Demon Slayer", "Kimetsu"]),
	"demon slayer": entry(["Demon Slayer", "귀멸의칼날", "Kimetsu"]),
	"해리포터": entry(["해리포터", "Harry Potter", "Wizarding World", "호그와트"], ["Warner Bros."]),
	"harry potter": entry(["Harry Potter", "Wizarding World"]),
	"반지의제왕": entry(["반지의제왕", "The Lord of the Rings", "LOTR"], ["New Line Cinema"]),
	"미션임파서블": entry(["미션임파서블", "Mission: Impossible", "Mission Impossible"]),
	"분노의질주": entry(["분노의질주", "Fast & Furious", "Fast and Furious"]),
	"쥬라기": entry(["쥬라기", "Jurassic Park", "Jurassic World"]),
	"트랜스포머": entry(["트랜스포머", "Transformers"]),
	"스타트렉": entry(["스타트렉", "Star Trek"]),
	"007": entry(["007", "James Bond"]),
	"존윅": entry(["존윅", "John Wick"]),
	"매트릭스": entry(["매트릭스", "The Matrix", "Matrix"]),
	"미니언즈": entry(["미니언즈", "Minions", "Despicable Me"], ["Illumination Entertainment"]),

	# ==================================================================
	# Genres / moods
	# ==================================================================
	"일본 애니": entry(["일본 애니", "일본 애니메이션", "Japan anime", "Anime"]),
	"애니": entry(["애니", "애니메이션", "Anime", "Animation"]),
	"힐링": entry(["힐링", "치유", "따뜻한", "잔잔한", "감성", "cozy", "healing"]),
	"감성": entry(["감성", "잔잔한", "따뜻한", "몽글몽글", "여운", "emotional"]),
	"가족": entry(["가족", "family", "가족영화", "패밀리", "kids", "children"]),
	"모험": entry(["모험", "adventure", "어드벤처"]),
	"판타지": entry(["판타지", "fantasy", "마법", "이세계"]),
	"로맨스": entry(["로맨스", "romance", "멜로", "사랑"]),
	"성장": entry(["성장", "coming of age", "청춘", "성장물"]),
	"공포": entry(["공포", "호러", "horror", "무서운", "점프스케어"]),
	"스릴러": entry(["스릴러", "thriller", "서스펜스", "추적"]),
	"코미디": entry(["코미디", "comedy", "유쾌", "웃긴"]),
	"액션": entry(["액션", "action", "전투", "격투"]),
	"sf": entry(["sf", "sci-fi", "공상과학", "우주", "미래"]),
	"미스터리": entry(["미스터리", "mystery", "추리"]),
	"범죄": entry(["범죄", "crime", "느와르"]),
	"다큐": entry(["다큐", "documentary", "다큐멘터리", "실화"]),
	"크리스마스": entry(["크리스마스", "christmas", "holiday", "연말", "성탄"]),
}

LEXICON: Mapping[str, LexiconEntry] = MappingProxyType(_TABLE)

# Shorthand / hashtag mentions a plain substring scan would miss
HASHTAG_RULES: Tuple[HashtagRule, ...] = (
	# platforms
	rule(r"디즈니\+|디즈니플러스|디즈니 플러스|디플|Disney\s*\+|Disney\s*Plus", "디즈니플러스"),
	rule(r"넷플|넷플릭스|Netflix", "넷플릭스"),
	rule(r"프라임\s*비디오|Prime\s*Video|Amazon\s*Prime", "prime video"),
	rule(r"애플\s*tv\+|Apple\s*TV\+|Apple\s*TV\s*Plus", "apple tv+"),
	rule(r"HBO\s*Max|HBOMax|\bMax\b", "hbo max"),
	rule(r"Paramount\+|Paramount\s*Plus|파라마운트\+", "paramount+"),
	# studios
	rule(r"디즈니|Disney", "디즈니"),
	rule(r"픽사|Pixar", "픽사"),
	rule(r"마블|Marvel|MCU", "마블"),
	rule(r"루카스필름|Lucasfilm", "lucasfilm"),
	rule(r"스타\s*워즈|Star\s*Wars", "스타워즈"),
	rule(r"워너|Warner", "워너"),
	rule(r"\bDC\b|DC\s*Studios|DC\s*Films|디씨", "dc"),
	# anime studios
	rule(r"지브리|Ghibli|미야자키|Miyazaki", "지브리"),
	rule(r"MAPPA|마파", "mappa"),
	rule(r"ufotable|유포테이블", "ufotable"),
	rule(r"Kyoto\s*Animation|KyoAni|쿄애니|교토\s*애니", "kyoto animation"),
	# k-content
	rule(r"티빙|TVING", "tving"),
	rule(r"웨이브|Wavve", "웨이브"),
	rule(r"쿠팡\s*플레이|Coupang\s*Play", "쿠팡플레이"),
	rule(r"왓챠|Watcha", "왓챠"),
	# phrases
	rule(r"일본\s*애니|일본\s*애니메이션|Japan\s*anime", "일본 애니"),
	rule(r"애니|애니메이션|Anime|Animation", "애니"),
)

logger.debug(f"[Lexicon] Loaded {len(LEXICON)} entries and {len(HASHTAG_RULES)} hashtag rules")
