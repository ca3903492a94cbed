# 목록 API 고정 쿼리 (호출자 파라미터보다 우선)
LISTING_BASE_PARAMS = {
    "mediaType": "game",
    "page": 1,
    "sort": "popularity",
}

# 상세 페이지에서 설명을 추출할 CSS 선택자
DESCRIPTION_SELECTOR = ".description"

# 무료 상품만 적재하므로 등급은 고정
FREE_RATING = "FREE"

SHORT_DESCRIPTION_LENGTH = 160

# 상품당 갤러리 이미지 업로드 상한 (고정 정책)
GALLERY_LIMIT = 5

# 이미지 참조 뒤에 붙는 크롭 크기 접미사
IMAGE_SIZE_SUFFIX = "_bg_crop_16080x655.jpg"

# 업로드 시 첨부 대상 모델 이름
UPLOAD_REF = "game"

# 게임 레코드 생성 후 대기 시간(초)
CREATION_DELAY_SECONDS = 2.0

GAME_COLLECTION = "games"
