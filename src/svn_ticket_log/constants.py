"""
공유 상수 정의 모듈

git-svn 메타데이터와 git log 출력 형식에 관련된 상수를 중앙에서 관리합니다.
"""

SHA1_HASH_LENGTH = 20
SHA1_HASH_ASCII_LENGTH = SHA1_HASH_LENGTH * 2

# git-svn이 커밋 메시지 끝에 붙이는 SVN 메타데이터 접두어
# https://github.com/git/git/blob/master/git-svn.perl
GIT_SVN_ID_STR = "git-svn-id"

# git log 출력에서 커밋 블록과 파일 목록을 구분하는 표식
LOG_COMMIT_DELIMITER = "CLOG-COMMIT-DELIMITER"
LOG_FILES_MARKER = "CLOG-FILES"

# git-svn .rev_map 레코드: 4바이트 big-endian 리비전 + 20바이트 SHA-1
REV_MAP_RECORD_SIZE = 4 + SHA1_HASH_LENGTH
MAX_SVN_REVISION = 0xFFFFFFFF

NO_TICKET_STR = "*No Ticket*"
MERGE_COMMIT_MARKER_STR = " (M)"
